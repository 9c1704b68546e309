"""
Seed Demo Data

Creates the RAD Design Studio demo workspace:
- admin@rad.example / Admin123!       -> Admin
- pm@rad.example / Pm123!             -> Project manager
- designer@rad.example / Designer123! -> Designer
- client@rad.example / Client123!     -> Client
plus a sample bedroom project with phases, tasks, revisions and materials.

Safe to run repeatedly: existing users and the sample project are left alone.

Run with: python seed_demo_data.py
"""
import asyncio
import sys
import os
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import AsyncSessionLocal, init_db
from app.core.security import get_password_hash
from app.models import (
    ActivityAction,
    ActivityLog,
    MaterialItem,
    MaterialStatus,
    Organization,
    Project,
    Revision,
    RevisionStatus,
    Task,
    TaskStatus,
    User,
    UserRole,
)
from app.services.phase_service import PhaseService
from app.services.progress import weighted_progress
from app.services.project_service import build_default_phases


ORGANIZATION_NAME = "RAD Design Studio"

DEMO_USERS = [
    {"email": "admin@rad.example", "full_name": "Admin User", "role": UserRole.ADMIN, "password": "Admin123!"},
    {"email": "pm@rad.example", "full_name": "Project Manager", "role": UserRole.PM, "password": "Pm123!"},
    {"email": "designer@rad.example", "full_name": "Senior Designer", "role": UserRole.DESIGNER, "password": "Designer123!"},
    {"email": "client@rad.example", "full_name": "John Client", "role": UserRole.CLIENT, "password": "Client123!"},
]

DEMO_PROJECT = {
    "code": "202505-INT-BED01",
    "name": "Interior Rumah Tinggal – Kamar Tidur Minimalis",
    "client_name": "Bapak John Doe",
    "start_date": datetime(2025, 5, 12),
    "end_date": datetime(2025, 6, 30),
    "description": "Complete interior design and renovation for master bedroom with minimalist concept.",
}

# (phase key, title, status, progress)
DEMO_TASKS = [
    ("moodboard", "Research minimalist bedroom concepts", TaskStatus.DONE, 100),
    ("moodboard", "Create color palette", TaskStatus.DONE, 100),
    ("moodboard", "Select furniture styles", TaskStatus.IN_PROGRESS, 75),
    ("layout", "Measure room dimensions", TaskStatus.DONE, 100),
    ("layout", "Create initial layout", TaskStatus.IN_PROGRESS, 60),
    ("layout", "Review layout with client", TaskStatus.BACKLOG, 0),
    ("design", "Develop 3D renderings", TaskStatus.IN_PROGRESS, 40),
    ("design", "Create material board", TaskStatus.BACKLOG, 0),
    ("design", "Design custom furniture", TaskStatus.BACKLOG, 0),
    ("material_scheduler", "Source materials", TaskStatus.BACKLOG, 0),
    ("material_scheduler", "Get samples", TaskStatus.BACKLOG, 0),
    ("construction_drawing", "Create technical drawings", TaskStatus.BACKLOG, 0),
    ("construction_drawing", "Prepare electrical plan", TaskStatus.BACKLOG, 0),
    ("supervision", "Site supervision", TaskStatus.BACKLOG, 0),
    ("supervision", "Quality control", TaskStatus.BACKLOG, 0),
]

DEMO_MATERIALS = [
    {"code": "PT-1", "name": "Cat Putih Dove", "category": "PT", "vendor": "Dulux", "price": 150000, "status": MaterialStatus.APPROVED},
    {"code": "PL-1", "name": "Laminates Oak Natural", "category": "PL", "vendor": "MKT", "price": 250000, "status": MaterialStatus.APPROVED},
    {"code": "GL-1", "name": "Kaca Tempered 8mm", "category": "GL", "vendor": "Asahimas", "price": 450000, "status": MaterialStatus.SAMPLED},
    {"code": "MT-1", "name": "Handle Brushed SS", "category": "MT", "vendor": "Hafele", "price": 75000, "status": MaterialStatus.APPROVED},
    {"code": "FT-1", "name": "Fabric Linen Beige", "category": "FT", "vendor": "Kris", "price": 180000, "status": MaterialStatus.SAMPLED},
]


async def get_or_create_users(db: AsyncSession, organization: Organization) -> dict:
    """Demo users keyed by role value"""
    users = {}
    for user_data in DEMO_USERS:
        user = await db.scalar(select(User).where(User.email == user_data["email"]))
        if user is None:
            user = User(
                email=user_data["email"],
                full_name=user_data["full_name"],
                hashed_password=get_password_hash(user_data["password"]),
                role=user_data["role"],
                organization_id=organization.id,
                is_active=True,
            )
            db.add(user)
            print(f"  Created: {user.email} ({user.role.value})")
        users[user_data["role"].value] = user

    await db.flush()
    return users


async def seed_demo_data(db: AsyncSession) -> Project:
    """Create the demo organization, users and sample project; returns the project"""
    organization = await db.scalar(select(Organization).where(Organization.name == ORGANIZATION_NAME))
    if organization is None:
        organization = Organization(name=ORGANIZATION_NAME)
        db.add(organization)
        await db.flush()

    users = await get_or_create_users(db, organization)
    admin, designer = users["admin"], users["designer"]

    project = await db.scalar(select(Project).where(Project.code == DEMO_PROJECT["code"]))
    if project is not None:
        print(f"  Sample project {project.code} already exists")
        await db.commit()
        return project

    project = Project(
        organization_id=organization.id,
        created_by=admin.id,
        phases=build_default_phases(DEMO_PROJECT["start_date"], DEMO_PROJECT["end_date"]),
        **DEMO_PROJECT,
    )
    db.add(project)
    await db.flush()
    phases = {phase.key: phase for phase in project.phases}

    column_order = {}
    for phase_key, title, status, progress in DEMO_TASKS:
        column_order[status] = column_order.get(status, 0) + 1
        db.add(Task(
            project_id=project.id,
            phase_id=phases[phase_key].id,
            title=title,
            status=status,
            progress=progress,
            order=column_order[status],
            assignee_id=designer.id if status in (TaskStatus.DONE, TaskStatus.IN_PROGRESS) else None,
        ))

    now = datetime.utcnow()
    design = phases["design"]
    db.add_all([
        Revision(
            phase_id=design.id,
            label="D1",
            notes="Initial design concept with minimalist approach",
            status=RevisionStatus.SUBMITTED,
            submitted_at=now,
            created_by=designer.id,
        ),
        Revision(
            phase_id=design.id,
            label="D2",
            notes="Revised design based on client feedback",
            status=RevisionStatus.APPROVED,
            submitted_at=now,
            decided_at=now,
            created_by=designer.id,
        ),
    ])

    db.add_all([MaterialItem(project_id=project.id, **material) for material in DEMO_MATERIALS])

    db.add_all([
        ActivityLog(project_id=project.id, actor_id=admin.id, action=action, payload=payload)
        for action, payload in (
            (ActivityAction.CREATE_PROJECT, {"name": project.name}),
            (ActivityAction.CREATE_TASK, {"title": DEMO_TASKS[0][1]}),
            (ActivityAction.UPDATE_TASK, {"status": TaskStatus.DONE.value}),
            (ActivityAction.CREATE_REVISION, {"label": "D1"}),
            (ActivityAction.CREATE_MATERIAL, {"code": "PT-1"}),
        )
    ])

    phase_service = PhaseService(db)
    for phase in project.phases:
        await phase_service.recalculate_phase_progress(phase)

    await db.commit()

    print(f"  Created project {project.code}: {len(DEMO_TASKS)} tasks, 2 revisions, "
          f"{len(DEMO_MATERIALS)} materials, overall progress {weighted_progress(project.phases)}%")
    return project


async def main():
    print("=" * 50)
    print("Seeding Demo Data...")
    print("=" * 50)

    await init_db()

    async with AsyncSessionLocal() as db:
        await seed_demo_data(db)

    print("=" * 50)
    print("\nDemo Login Credentials:")
    print("-" * 50)
    for user_data in DEMO_USERS:
        print(f"| {user_data['role'].value:<9}| {user_data['email']:<22}| {user_data['password']:<13}|")
    print("-" * 50)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
