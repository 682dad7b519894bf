"""
Demo content for the in-memory store.

Seeding only runs when ``SEED_DEMO_DATA`` is enabled. Demo accounts share the
password from ``SEED_DEMO_PASSWORD``; without it no accounts (and therefore no
projects) are created.
"""
from typing import Any, Dict, List, Optional

from app.services.auth.auth_utils import hash_password
from app.utils.logger_utils import logger

DEMO_USERS: List[Dict[str, Any]] = [
    {
        "name": "Admin User",
        "email": "admin@innovationhub.edu",
        "role": "admin",
        "faculty": "Administration",
        "department": "IT",
    },
    {
        "name": "Supervisor User",
        "email": "supervisor@innovationhub.edu",
        "role": "supervisor",
        "faculty": "Engineering",
        "department": "Computer Science",
    },
    {
        "name": "Student User",
        "email": "student@innovationhub.edu",
        "role": "student",
        "faculty": "Science",
        "department": "Information Technology",
    },
]

DEMO_PROJECTS: List[Dict[str, Any]] = [
    {
        "title": "Smart Agriculture System",
        "description": "An IoT-based system for monitoring crop health and optimizing irrigation.",
        "category": "IoT",
        "technologies": ["Arduino", "Sensors", "Node.js"],
        "faculty": "Engineering",
        "department": "Agricultural Engineering",
        "year": 2024,
        "status": "approved",
        "github_url": "https://github.com/student/smart-agriculture",
        "live_demo_url": "https://demo.smart-agri.com",
        "views": 45,
    },
    {
        "title": "AI-Powered Health Monitor",
        "description": "Machine learning application for predicting health risks from vital signs.",
        "category": "AI/ML",
        "technologies": ["Python", "TensorFlow", "React"],
        "faculty": "Science",
        "department": "Computer Science",
        "year": 2024,
        "status": "approved",
        "github_url": "https://github.com/student/health-monitor",
        "live_demo_url": "https://demo.health-ai.com",
        "views": 32,
    },
    {
        "title": "E-Learning Platform",
        "description": "Interactive online learning platform with video conferencing and assessments.",
        "category": "Web Development",
        "technologies": ["React", "Node.js", "MongoDB", "WebRTC"],
        "faculty": "Education",
        "department": "Educational Technology",
        "year": 2024,
        "status": "pending",
        "github_url": "https://github.com/student/e-learning",
        "live_demo_url": "https://demo.e-learning.com",
        "views": 18,
    },
]


async def seed_demo_data(store, password: Optional[str]) -> None:
    if not password:
        logger.warning("⚠️ SEED_DEMO_PASSWORD not set, skipping demo data")
        return

    hashed = hash_password(password)
    owner_id = None
    for data in DEMO_USERS:
        user = await store.users.find_one({"email": data["email"]})
        if not user:
            user = await store.users.create({**data, "password": hashed, "is_active": True, "last_login": None})
            logger.info(f"✅ Created demo user: {data['email']}")
        if data["role"] == "student":
            owner_id = user["_id"]

    for data in DEMO_PROJECTS:
        if await store.projects.find_one({"title": data["title"]}):
            continue
        await store.projects.create({
            **data,
            "submitted_by": owner_id,
            "likes": [],
            "supervisor_comments": [],
            "images": [],
            "team_members": [],
        })
    logger.info(f"✅ Demo data ready: {len(DEMO_USERS)} users, {len(DEMO_PROJECTS)} projects")
