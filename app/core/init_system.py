import logging
from sqlalchemy import select
from app.core.config import settings
from app.database import SessionLocal
from app.models.company import Company, CompanyStatus
from app.models.user import User, UserRole
from app.services import auth as auth_service

logger = logging.getLogger(__name__)

def init_system_data():
    """
    Checks if the system needs initialization.
    If no super admin exists, creates the management company and a super admin user.
    """
    if not settings.bootstrap.enabled:
        logger.info("System bootstrap disabled.")
        return

    db = SessionLocal()
    try:
        existing = db.execute(
            select(User.id).where(User.role == UserRole.SUPER_ADMIN)
        ).first()
        if existing is not None:
            logger.info("System initialization check: super admin already exists.")
            return

        logger.info("No super admin found, creating one...")
        company = Company(
            name=settings.bootstrap.company_name,
            credits=0,
            seat_price=0,
            seat_booking_limit=0,
            status=CompanyStatus.ACTIVE.value,
        )
        db.add(company)
        db.flush()  # Get company ID

        admin = User(
            email=settings.bootstrap.email,
            hashed_password=auth_service.get_password_hash(settings.bootstrap.password),
            full_name="Super Admin",
            role=UserRole.SUPER_ADMIN,
            company_id=company.id,
            is_active=True,
        )
        db.add(admin)
        db.flush()
        company.admin_id = admin.id

        db.commit()
        logger.info(f"✓ Created super admin {settings.bootstrap.email} (change the password immediately)")
    except Exception as e:
        db.rollback()
        logger.error(f"Error during system initialization check: {str(e)}", exc_info=True)
        raise
    finally:
        db.close()
