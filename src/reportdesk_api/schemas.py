"""Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from reportdesk_api.models.enums import FileType, ReportPermissionLevel, UserRole


def _normalize_email(v: str) -> str:
    # EmailStr only lowercases the domain
    return v.lower()


class MessageResponse(BaseModel):
    """Generic acknowledgement."""

    message: str


# --- User Schemas ---


class UserCreate(BaseModel):
    """Schema for creating a user directly (admin action)."""

    username: str = Field(min_length=1, max_length=255)
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    password: str
    role: UserRole = UserRole.USER
    # Only honoured for superadmin callers
    organization_id: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class UserUpdate(BaseModel):
    """Schema for updating a user."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: UserRole | None = None
    is_active: bool | None = None


class UserResponse(BaseModel):
    """Schema for user response. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    email: str
    name: str
    role: UserRole
    organization_id: str | None
    is_active: bool
    last_active_at: datetime | None
    created_at: datetime


# --- Auth Schemas ---


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class LoginResponse(BaseModel):
    user: UserResponse
    token: str
    token_type: str = "Bearer"
    expires_in: int  # seconds


class SessionResponse(BaseModel):
    """Session probe; never fails on a missing or bad credential."""

    authenticated: bool
    user: UserResponse | None = None


class RegisterRequest(BaseModel):
    """Accept an invitation and create the account."""

    token: str
    password: str
    name: str = Field(min_length=1, max_length=255)


class RegisterResponse(BaseModel):
    user: UserResponse
    message: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


# --- Organization Schemas ---


class OrganizationAdminCreate(BaseModel):
    """Initial admin account created together with an organization."""

    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=255)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class OrganizationCreate(BaseModel):
    """Schema for creating an organization."""

    name: str = Field(min_length=1, max_length=255)
    domain: str | None = None
    industry: str | None = None
    size: str | None = None
    settings: dict[str, Any] = Field(default_factory=dict)
    admin: OrganizationAdminCreate | None = None


class OrganizationUpdate(BaseModel):
    """Schema for updating an organization."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    domain: str | None = None
    industry: str | None = None
    size: str | None = None
    settings: dict[str, Any] | None = None


class OrganizationResponse(BaseModel):
    """Schema for organization response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    domain: str | None
    industry: str | None
    size: str | None
    settings: dict[str, Any]
    is_deleted: bool
    created_at: datetime


class BootstrapAdminResponse(UserResponse):
    """Bootstrap admin, with the temporary password shown only once."""

    temp_password: str


class OrganizationCreateResponse(BaseModel):
    organization: OrganizationResponse
    admin: BootstrapAdminResponse | None = None
    message: str


class OrganizationDeleteResponse(BaseModel):
    organization: OrganizationResponse
    message: str


# --- Folder Schemas ---


class FolderCreate(BaseModel):
    """Schema for creating a folder."""

    name: str = Field(min_length=1, max_length=255)
    parent_id: str | None = None
    # Only honoured for superadmin callers
    organization_id: str | None = None


class FolderUpdate(BaseModel):
    """Schema for renaming or moving a folder.

    An explicit ``parent_id: null`` moves the folder to the top level.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    parent_id: str | None = None


class FolderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    parent_id: str | None
    organization_id: str
    created_by: str
    created_at: datetime


# --- Report Schemas ---


class ReportCreate(BaseModel):
    """Schema for registering an uploaded report."""

    name: str = Field(min_length=1, max_length=255)
    file_type: FileType
    file_size: int | None = Field(default=None, ge=0)
    file_path: str | None = None
    folder_id: str | None = None
    # Only honoured for superadmin callers
    organization_id: str | None = None


class ReportUpdate(BaseModel):
    """Schema for renaming a report or moving it between folders.

    An explicit ``folder_id: null`` moves the report out of any folder.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    folder_id: str | None = None


class ReportStarRequest(BaseModel):
    """Set the star flag; omit ``starred`` to toggle it."""

    starred: bool | None = None


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    file_type: FileType
    file_size: int | None
    file_path: str | None
    folder_id: str | None
    organization_id: str
    created_by: str
    is_starred: bool
    view_count: int
    created_at: datetime
    updated_at: datetime


# --- Permission Schemas ---


class PermissionGrant(BaseModel):
    user_id: str
    permission: ReportPermissionLevel


class PermissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    report_id: str
    user_id: str
    permission: ReportPermissionLevel
    granted_by: str
    created_at: datetime


# --- Activity Schemas ---


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    organization_id: str
    action: str
    resource: str | None
    resource_id: str | None
    metadata: dict[str, Any] = Field(
        validation_alias=AliasChoices("activity_metadata", "metadata")
    )
    created_at: datetime


class SystemActivityResponse(ActivityResponse):
    organization_name: str


# --- Invitation Schemas ---


class InvitationCreate(BaseModel):
    email: EmailStr
    role: UserRole = UserRole.USER
    # Only honoured for superadmin callers
    organization_id: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)


class InvitationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    role: UserRole | None
    organization_id: str | None
    invited_by: str
    is_accepted: bool
    expires_at: datetime
    created_at: datetime


class InvitationCreatedResponse(InvitationResponse):
    """Creation response; the only place the token is ever returned."""

    token: str


# --- System Schemas ---


class OrganizationMetrics(BaseModel):
    id: str
    name: str
    domain: str | None
    industry: str | None
    size: str | None
    is_deleted: bool
    user_count: int
    admin_count: int
    report_count: int
    created_at: datetime


class SystemMetricsResponse(BaseModel):
    total_organizations: int
    active_organizations: int
    total_users: int
    total_reports: int
    organizations: list[OrganizationMetrics]


# --- Upload Schemas ---


class UploadedFile(BaseModel):
    original_name: str
    filename: str
    path: str
    url: str
    size: int
    file_type: FileType


class UploadResponse(BaseModel):
    message: str
    file: UploadedFile
