from abc import ABC, abstractmethod
from typing import List, NamedTuple, Optional
from uuid import UUID
import logging

from sqlalchemy import exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ConflictError
from ..core.security import UserRole
from ..models.doctor import DoctorProfile
from ..models.patient import PatientProfile
from ..models.user import User, UserRoleAssignment
from ..schemas.auth import DoctorSignup, PatientSignup

logger = logging.getLogger(__name__)


class Credentials(NamedTuple):
    user_id: UUID
    password_hash: str


class AuthRepository(ABC):
    """Store access needed by signup, login and the role guard."""

    @abstractmethod
    def create_patient(self, data: PatientSignup, password_hash: str) -> UUID:
        ...

    @abstractmethod
    def create_doctor(self, data: DoctorSignup, password_hash: str) -> UUID:
        ...

    @abstractmethod
    def patient_credentials(self, hn: int, citizen_id: str) -> Optional[Credentials]:
        ...

    @abstractmethod
    def doctor_credentials(self, mln: str, citizen_id: str) -> Optional[Credentials]:
        ...

    @abstractmethod
    def has_role(self, user_id: UUID, role: UserRole) -> bool:
        ...

    @abstractmethod
    def get_user(self, user_id: UUID) -> Optional[User]:
        ...

    @abstractmethod
    def roles_of(self, user_id: UUID) -> List[UserRole]:
        ...


class SqlAlchemyAuthRepository(AuthRepository):
    def __init__(self, db: Session):
        self.db = db

    def create_patient(self, data: PatientSignup, password_hash: str) -> UUID:
        user = self._new_user(data, password_hash)
        user.patient = PatientProfile(hn=data.hn)
        user.roles.append(UserRoleAssignment(role=UserRole.PATIENT))
        return self._commit_user(user)

    def create_doctor(self, data: DoctorSignup, password_hash: str) -> UUID:
        user = self._new_user(data, password_hash)
        user.doctor = DoctorProfile(
            mln=data.mln,
            department=data.department,
            position=data.position,
        )
        user.roles.append(UserRoleAssignment(role=UserRole.DOCTOR))
        return self._commit_user(user)

    def patient_credentials(self, hn: int, citizen_id: str) -> Optional[Credentials]:
        row = (
            self.db.query(User.id, User.password_hash)
            .join(PatientProfile, PatientProfile.user_id == User.id)
            .filter(PatientProfile.hn == hn, User.citizen_id == citizen_id)
            .first()
        )
        return Credentials(*row) if row else None

    def doctor_credentials(self, mln: str, citizen_id: str) -> Optional[Credentials]:
        row = (
            self.db.query(User.id, User.password_hash)
            .join(DoctorProfile, DoctorProfile.user_id == User.id)
            .filter(DoctorProfile.mln == mln, User.citizen_id == citizen_id)
            .first()
        )
        return Credentials(*row) if row else None

    def has_role(self, user_id: UUID, role: UserRole) -> bool:
        return self.db.query(
            exists().where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role == role,
            )
        ).scalar()

    def get_user(self, user_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def roles_of(self, user_id: UUID) -> List[UserRole]:
        rows = (
            self.db.query(UserRoleAssignment.role)
            .filter(UserRoleAssignment.user_id == user_id)
            .order_by(UserRoleAssignment.role)
            .all()
        )
        return [role for (role,) in rows]

    def _new_user(self, data, password_hash: str) -> User:
        return User(
            citizen_id=data.citizen_id,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone,
            password_hash=password_hash,
        )

    def _commit_user(self, user: User) -> UUID:
        """Insert user, profile and role together or not at all."""
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.info(f"Signup rejected by store constraint: {e.orig}")
            raise ConflictError("Account already exists")
        return user.id
