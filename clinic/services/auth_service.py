from datetime import timedelta
from typing import Optional
from uuid import UUID
import logging

from ..core.errors import AuthenticationError
from ..core.security import TokenAuthority, get_password_hash, verify_password
from ..repositories.auth_repository import AuthRepository, Credentials
from ..schemas.auth import (
    AccessTokenResponse, DoctorLogin, DoctorSignup,
    PatientLogin, PatientSignup, UserResponse
)

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, repo: AuthRepository, tokens: TokenAuthority, token_ttl: timedelta):
        self.repo = repo
        self.tokens = tokens
        self.token_ttl = token_ttl

    def register_patient(self, data: PatientSignup) -> AccessTokenResponse:
        """Create a patient account and sign it in."""
        user_id = self.repo.create_patient(data, get_password_hash(data.password))
        logger.info(f"Patient {user_id} registered")
        return self._token_for(user_id)

    def register_doctor(self, data: DoctorSignup) -> AccessTokenResponse:
        """Create a doctor account and sign it in."""
        user_id = self.repo.create_doctor(data, get_password_hash(data.password))
        logger.info(f"Doctor {user_id} registered")
        return self._token_for(user_id)

    def login_patient(self, data: PatientLogin) -> AccessTokenResponse:
        credentials = self.repo.patient_credentials(data.hn, data.citizen_id)
        return self._token_for(self._check_password(credentials, data.password))

    def login_doctor(self, data: DoctorLogin) -> AccessTokenResponse:
        credentials = self.repo.doctor_credentials(data.mln, data.citizen_id)
        return self._token_for(self._check_password(credentials, data.password))

    def refresh(self, user_id: UUID) -> AccessTokenResponse:
        """Issue a fresh token; the presented one stays valid until it expires."""
        return self._token_for(user_id)

    def current_user(self, user_id: UUID) -> UserResponse:
        user = self.repo.get_user(user_id)
        if not user:
            raise AuthenticationError("User not found")

        return UserResponse(
            user_id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            phone=user.phone,
            roles=self.repo.roles_of(user_id),
        )

    def _check_password(self, credentials: Optional[Credentials], password: str) -> UUID:
        if not credentials or not verify_password(password, credentials.password_hash):
            raise AuthenticationError("Invalid credentials")
        return credentials.user_id

    def _token_for(self, user_id: UUID) -> AccessTokenResponse:
        return AccessTokenResponse(
            access_token=self.tokens.issue(user_id, self.token_ttl),
            expires_in=int(self.token_ttl.total_seconds()),
        )
