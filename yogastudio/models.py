import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .shared.dates import utcnow


def generate_uuid():
    return str(uuid.uuid4())


# ============================================================================
# ACCOUNTS & ROLES
# ============================================================================


class User(Base):
    """Local mirror of an identity-provider account, keyed by the token's sub claim"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    profile = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    user_roles = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        foreign_keys="UserRole.user_id",
    )

    @property
    def role_names(self) -> list[str]:
        return sorted(ur.role.name for ur in self.user_roles if ur.role)


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    full_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    bio = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="profile")


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(50), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)
    assigned_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="user_roles", foreign_keys=[user_id])
    role = relationship("Role")


class RoleChange(Base):
    """Audit trail of role set replacements"""

    __tablename__ = "role_changes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    changed_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    old_roles = Column(JSON, default=list, nullable=False)
    new_roles = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class AdminUser(Base):
    """Legacy e-mail allow-list of administrators"""

    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(String(50), nullable=False, default="admin")  # admin, super_admin
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# ============================================================================
# LEARNING CENTER
# ============================================================================


class Article(Base):
    __tablename__ = "articles"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    preview_text = Column(Text, nullable=False)
    image_url = Column(String(1000), nullable=True)
    video_url = Column(String(1000), nullable=True)
    category = Column(String(100), nullable=False, default="general", index=True)
    tags = Column(JSON, default=list, nullable=False)
    status = Column(String(20), nullable=False, default="draft", index=True)  # draft, published
    view_count = Column(Integer, nullable=False, default=0)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    published_at = Column(DateTime, nullable=True, index=True)

    ratings = relationship("Rating", back_populates="article", cascade="all, delete-orphan")
    views = relationship("ArticleView", back_populates="article", cascade="all, delete-orphan")


class Rating(Base):
    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("article_id", "fingerprint", name="uq_rating_article_fingerprint"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    article_id = Column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rating = Column(Integer, nullable=False)  # 1..5
    fingerprint = Column(String(255), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    article = relationship("Article", back_populates="ratings")


class ArticleView(Base):
    __tablename__ = "article_views"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    article_id = Column(
        String(36), ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    fingerprint = Column(String(255), nullable=False, index=True)
    viewed_at = Column(DateTime, default=utcnow, nullable=False)

    article = relationship("Article", back_populates="views")


# ============================================================================
# CLASSES
# ============================================================================


class ClassType(Base):
    __tablename__ = "class_types"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    difficulty_level = Column(String(50), default="beginner")
    price = Column(Numeric(10, 2), default=0)
    duration_minutes = Column(Integer, default=60, nullable=False)
    max_participants = Column(Integer, default=20, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Instructor(Base):
    __tablename__ = "instructors"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    bio = Column(Text, nullable=True)
    email = Column(String(255), unique=True, nullable=True)
    phone = Column(String(50), nullable=True)
    specialties = Column(JSON, default=list, nullable=False)
    experience_years = Column(Integer, default=0)
    certification = Column(String(255), nullable=True)
    avatar_url = Column(String(1000), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    scheduled_classes = relationship("ScheduledClass", back_populates="instructor")


class ClassSchedule(Base):
    """Recurring weekly timetable slot"""

    __tablename__ = "class_schedules"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    class_type_id = Column(String(36), ForeignKey("class_types.id", ondelete="CASCADE"), nullable=False)
    instructor_id = Column(String(36), ForeignKey("instructors.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday .. 6 = Saturday
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, default=60, nullable=False)
    max_participants = Column(Integer, default=20, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    effective_from = Column(Date, nullable=True)
    effective_until = Column(Date, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    class_type = relationship("ClassType")
    instructor = relationship("Instructor")


class ScheduledClass(Base):
    """A dated class instance that can be booked"""

    __tablename__ = "scheduled_classes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    class_type_id = Column(String(36), ForeignKey("class_types.id"), nullable=False)
    instructor_id = Column(String(36), ForeignKey("instructors.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)
    max_participants = Column(Integer, nullable=False)
    current_participants = Column(Integer, default=0, nullable=False)
    # scheduled, in_progress, completed, cancelled
    status = Column(String(20), default="scheduled", nullable=False)
    meeting_link = Column(String(1000), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    class_type = relationship("ClassType")
    instructor = relationship("Instructor", back_populates="scheduled_classes")
    bookings = relationship("ClassBooking", back_populates="scheduled_class", cascade="all, delete-orphan")
    waitlist = relationship(
        "WaitlistEntry",
        back_populates="scheduled_class",
        cascade="all, delete-orphan",
        order_by="WaitlistEntry.position",
    )

    @property
    def spots_left(self) -> int:
        return max(0, self.max_participants - self.current_participants)


class ClassBooking(Base):
    __tablename__ = "class_bookings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    scheduled_class_id = Column(
        String(36), ForeignKey("scheduled_classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    emergency_phone = Column(String(50), nullable=True)
    special_requests = Column(Text, default="")
    payment_status = Column(String(20), default="pending", nullable=False)  # pending, paid, refunded, failed
    # confirmed, cancelled, attended, no_show
    booking_status = Column(String(20), default="confirmed", nullable=False)
    booking_date = Column(DateTime, default=utcnow, nullable=False)
    cancelled_at = Column(DateTime, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    scheduled_class = relationship("ScheduledClass", back_populates="bookings")


class WaitlistEntry(Base):
    __tablename__ = "waitlist"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    scheduled_class_id = Column(
        String(36), ForeignKey("scheduled_classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    position = Column(Integer, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    scheduled_class = relationship("ScheduledClass", back_populates="waitlist")


class Booking(Base):
    """Simple booking of a named class from the public booking form"""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    class_name = Column(String(255), nullable=False)
    instructor = Column(String(255), nullable=False)
    class_date = Column(Date, nullable=False)
    class_time = Column(String(50), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    experience_level = Column(String(50), nullable=False, default="beginner")
    special_requests = Column(Text, default="")
    emergency_contact = Column(String(255), nullable=False)
    emergency_phone = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="confirmed")
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# ============================================================================
# INQUIRIES
# ============================================================================


class YogaQuery(Base):
    __tablename__ = "yoga_queries"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    subject = Column(String(500), nullable=False)
    category = Column(String(100), nullable=False, default="general")
    message = Column(Text, nullable=False)
    experience_level = Column(String(50), nullable=False, default="beginner")
    status = Column(String(20), nullable=False, default="pending")  # pending, responded, closed
    response = Column(Text, default="")
    responded_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class ContactMessage(Base):
    __tablename__ = "contact_messages"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), default="")
    subject = Column(String(500), nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="new")
    created_at = Column(DateTime, default=utcnow, nullable=False)


class FormSubmission(Base):
    __tablename__ = "form_submissions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    type = Column(String(20), nullable=False, index=True)  # booking, query, contact, corporate
    data = Column(JSON, nullable=False, default=dict)
    user_email = Column(String(255), nullable=True)
    user_name = Column(String(255), nullable=True)
    user_phone = Column(String(50), nullable=True)
    status = Column(String(20), nullable=False, default="new")  # new, in_progress, completed, rejected
    notes = Column(Text, nullable=True)
    processed_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    processed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


# ============================================================================
# NEWSLETTERS & SETTINGS
# ============================================================================


class NewsletterSubscriber(Base):
    __tablename__ = "newsletter_subscribers"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False, default="active")  # active, unsubscribed
    subscribed_at = Column(DateTime, default=utcnow, nullable=False)
    unsubscribed_at = Column(DateTime, nullable=True)


class Newsletter(Base):
    __tablename__ = "newsletters"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(500), nullable=False)
    subject = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default="draft")  # draft, sent
    sent_at = Column(DateTime, nullable=True)
    recipient_count = Column(Integer, nullable=False, default=0)
    created_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class BusinessSetting(Base):
    __tablename__ = "business_settings"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(JSON, nullable=True)
    description = Column(Text, nullable=True)
    updated_by = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


# ============================================================================
# BILLING RECORDS
# ============================================================================


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    billing_interval = Column(String(20), default="monthly")  # monthly, yearly
    features = Column(JSON, default=list, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class UserSubscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(String(36), ForeignKey("subscription_plans.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default="active", nullable=False)  # active, cancelled, expired
    started_at = Column(DateTime, default=utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    plan = relationship("SubscriptionPlan")


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    subscription_id = Column(
        String(36), ForeignKey("user_subscriptions.id", ondelete="SET NULL"), nullable=True
    )
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="USD", nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, completed, failed, refunded
    payment_method = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
