"""
Reference data: default roles (seeded on every startup) and the studio's
sample catalogue (class types, instructors, plans) for fresh installs.
"""

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from .models import ClassType, Instructor, Role, SubscriptionPlan

logger = logging.getLogger(__name__)

DEFAULT_ROLES = {
    "user": "Default role for every registered member",
    "instructor": "Teaches classes and can view their schedule",
    "admin": "Full access to the admin dashboard",
    "super_admin": "Administrator who can also manage other administrators",
    "mantra_curator": "Writes and publishes their own learning center articles",
}

SAMPLE_CLASS_TYPES = [
    {"name": "Hatha Yoga", "description": "Gentle, foundational postures and breathing", "difficulty_level": "beginner", "price": Decimal("25.00"), "duration_minutes": 60},
    {"name": "Vinyasa Flow", "description": "Breath-synchronised flowing sequences", "difficulty_level": "intermediate", "price": Decimal("30.00"), "duration_minutes": 75},
    {"name": "Ashtanga", "description": "Traditional set series with a strong pace", "difficulty_level": "advanced", "price": Decimal("35.00"), "duration_minutes": 90},
    {"name": "Yin Yoga", "description": "Long passive holds for deep tissue release", "difficulty_level": "beginner", "price": Decimal("25.00"), "duration_minutes": 60},
    {"name": "Hot Yoga", "description": "Heated room practice for strength and flexibility", "difficulty_level": "intermediate", "price": Decimal("32.00"), "duration_minutes": 60},
]

SAMPLE_INSTRUCTORS = [
    {"name": "Sarah Johnson", "email": "sarah@yogastudio.example", "specialties": ["Hatha", "Yin"], "experience_years": 10, "certification": "RYT-500"},
    {"name": "Michael Chen", "email": "michael@yogastudio.example", "specialties": ["Vinyasa", "Power Yoga"], "experience_years": 8, "certification": "RYT-500"},
    {"name": "Emma Rodriguez", "email": "emma@yogastudio.example", "specialties": ["Ashtanga", "Meditation"], "experience_years": 12, "certification": "E-RYT-500"},
    {"name": "David Kumar", "email": "david@yogastudio.example", "specialties": ["Hot Yoga", "Pranayama"], "experience_years": 6, "certification": "RYT-200"},
]

SAMPLE_PLANS = [
    {"name": "Basic Monthly", "description": "8 classes per month", "price": Decimal("89.00"), "billing_interval": "monthly", "features": ["8 classes per month", "Online booking"]},
    {"name": "Unlimited Monthly", "description": "Unlimited classes", "price": Decimal("149.00"), "billing_interval": "monthly", "features": ["Unlimited classes", "Online booking", "Workshop discounts"]},
    {"name": "Basic Annual", "description": "8 classes per month, billed yearly", "price": Decimal("890.00"), "billing_interval": "yearly", "features": ["8 classes per month", "Two months free"]},
    {"name": "Unlimited Annual", "description": "Unlimited classes, billed yearly", "price": Decimal("1490.00"), "billing_interval": "yearly", "features": ["Unlimited classes", "Two months free", "Workshop discounts"]},
]


def ensure_role(db: Session, name: str) -> Role:
    role = db.query(Role).filter(Role.name == name).first()
    if role is None:
        role = Role(name=name, description=DEFAULT_ROLES.get(name))
        db.add(role)
        db.flush()
        logger.info(f"🆕 Created role: {name}")
    return role


def seed_default_roles(db: Session) -> int:
    """Insert any missing default role; returns how many were added"""
    existing = {name for (name,) in db.query(Role.name).all()}
    added = 0
    for name, description in DEFAULT_ROLES.items():
        if name not in existing:
            db.add(Role(name=name, description=description))
            added += 1
    db.commit()
    if added:
        logger.info(f"✅ Seeded {added} default roles")
    return added


def seed_sample_data(db: Session) -> dict:
    """Populate an empty catalogue. Tables that already hold rows are left alone."""
    counts = {"class_types": 0, "instructors": 0, "plans": 0}

    if db.query(ClassType.id).first() is None:
        for data in SAMPLE_CLASS_TYPES:
            db.add(ClassType(**data))
        counts["class_types"] = len(SAMPLE_CLASS_TYPES)

    if db.query(Instructor.id).first() is None:
        for data in SAMPLE_INSTRUCTORS:
            db.add(Instructor(**data))
        counts["instructors"] = len(SAMPLE_INSTRUCTORS)

    if db.query(SubscriptionPlan.id).first() is None:
        for data in SAMPLE_PLANS:
            db.add(SubscriptionPlan(**data))
        counts["plans"] = len(SAMPLE_PLANS)

    db.commit()
    logger.info(f"✅ Sample data seeded: {counts}")
    return counts
