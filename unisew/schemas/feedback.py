"""피드백/신고 Pydantic 스키마.

Feedback and report schemas.
Backend payloads use camelCase keys; ``WireModel`` maps them onto
snake_case attributes. Request bodies sent to the backend are dumped with
``by_alias=True``.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """백엔드 camelCase 페이로드용 베이스 모델 (Base model for camelCase backend payloads)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# 백엔드 상태 표기 정규화 — Backend status spellings, after lowercasing and "-" -> "_"
_REPORT_STATUS_ALIASES: dict[str, ReportStatus] = {
    "pending": ReportStatus.PENDING,
    "under_review": ReportStatus.PENDING,
    "feedback_pending": ReportStatus.PENDING,
    "approved": ReportStatus.APPROVED,
    "accepted": ReportStatus.APPROVED,
    "feedback_approved": ReportStatus.APPROVED,
    "rejected": ReportStatus.REJECTED,
    "feedback_rejected": ReportStatus.REJECTED,
}


def normalise_report_status(value: str) -> ReportStatus | None:
    """FEEDBACK_PENDING, under-review 등 백엔드 표기를 ReportStatus로 변환."""
    key = value.strip().lower().replace("-", "_")
    if key in _REPORT_STATUS_ALIASES:
        return _REPORT_STATUS_ALIASES[key]
    return _REPORT_STATUS_ALIASES.get(key.removeprefix("feedback_"))


class ApprovalAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ProblemLevel(str, Enum):
    """신고 심각도 — 환불 규모 산정에 사용 (Severity used downstream to size a refund)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    SERIOUS = "serious"


class RefundDecision(str, Enum):
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class EvidenceMode(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


# === 조회 모델 (Read models) ===

class Party(WireModel):
    """신고/피드백 발신자 또는 수신자 (Sender or receiver of an item)."""

    name: str | None = None
    email: str | None = None
    avatar: str | None = None
    type: str | None = None  # school, designer, garment


class Attachment(WireModel):
    id: int | str | None = None
    url: str


class FeedbackItem(WireModel):
    """피드백 또는 신고 항목.

    Feedback or report item as returned by the backend.
    ``is_report`` separates complaints (approval workflow) from plain
    satisfaction feedback (rating + comment).

    Attributes:
        partner_content: 디자이너/공장의 소명 내용, 있으면 이미 증빙 제출됨
                         (Partner's rebuttal; its presence means evidence was already given)
    """

    id: int
    is_report: bool = Field(default=False, validation_alias=AliasChoices("report", "isReport", "is_report"))
    content: str = ""
    rating: int | None = None
    images: list[Attachment] = []
    video: str | None = None
    status: ReportStatus = ReportStatus.PENDING
    creation_date: datetime | None = None
    sender: Party | None = None
    receiver: Party | None = None
    order: dict[str, Any] | None = None
    design_request: dict[str, Any] | None = None
    partner_content: str | None = None
    partner_image_urls: list[str] = []
    partner_video: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalise_report_status(value) or value
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def _zero_rating_is_none(cls, value: Any) -> Any:
        # 신고 항목은 평점 0으로 내려옴 — Reports carry rating 0
        if value in (0, "0", ""):
            return None
        return value

    @field_validator("images", mode="before")
    @classmethod
    def _wrap_plain_urls(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [{"url": v} if isinstance(v, str) else v for v in value]
        return value or []

    @property
    def has_evidence(self) -> bool:
        return bool(self.partner_content)


# === 관리자 승인 (Admin approval) ===

class ApprovalDraft(BaseModel):
    """승인/거절 다이얼로그 입력값 (Ephemeral approval decision)."""

    report_id: int
    action: ApprovalAction
    problem_level: ProblemLevel | None = None
    message_for_school: str = ""
    message_for_partner: str = ""


class ApprovalRequest(WireModel):
    feedback_id: int
    message_for_school: str = ""
    message_for_partner: str = ""
    approved: bool


class RefundRequest(WireModel):
    report_id: int
    decision: RefundDecision
    problem_level: ProblemLevel


class RefundResult(WireModel):
    report_id: int | None = None
    decision: RefundDecision | None = None
    problem_level: ProblemLevel | None = None


# === 증빙 제출 (Evidence submission) ===

class EvidenceDraft(BaseModel):
    """증빙 다이얼로그 입력값.

    Ephemeral evidence dialog state. Uploaded URLs survive a failed submit so
    the partner does not need to upload again.
    """

    report_id: int
    content: str = ""
    mode: EvidenceMode = EvidenceMode.IMAGE
    image_urls: list[str] = []
    staged_files: list[str] = []  # 이번 세션에 업로드한 파일 이름 (Names of files uploaded in this dialog)
    video_url: str | None = None
    video_file: str | None = None
    progress: int = 0  # 0~100
    uploading: bool = False


class EvidenceRequest(WireModel):
    """증빙 제출 요청 — 이미지 목록 또는 영상 하나, 둘 중 하나만.

    Evidence payload: exactly one medium, never both and never neither.
    """

    report_id: int
    content: str = Field(min_length=1)
    image_urls: list[str] = []
    video_url: str | None = None

    @model_validator(mode="after")
    def _exactly_one_medium(self) -> "EvidenceRequest":
        has_images = bool(self.image_urls)
        has_video = bool(self.video_url)
        if has_images == has_video:
            raise ValueError("evidence must carry either image URLs or a video URL")
        return self


# === API 요청 바디 (API request bodies) ===

class ApprovalOpen(BaseModel):
    action: ApprovalAction


class ApprovalDraftUpdate(BaseModel):
    problem_level: ProblemLevel | None = None
    message_for_school: str | None = None
    message_for_partner: str | None = None


class EvidenceContentUpdate(BaseModel):
    content: str


class EvidenceModeUpdate(BaseModel):
    mode: EvidenceMode
