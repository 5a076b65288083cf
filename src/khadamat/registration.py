"""Three-step account registration wizard with per-step validation gates."""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
import re
from collections.abc import Awaitable, Callable
from enum import Enum
from pathlib import Path
from typing import Dict, Literal, Tuple

from pydantic import BaseModel, ConfigDict

from .config import Settings
from .metrics import record_submission, record_validation_failure
from .models import Notification
from .notifications import Notifier

logger = logging.getLogger(__name__)

UserType = Literal["provider", "customer"]

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"[0-9]{10}")
MIN_PASSWORD_LENGTH = 8


class RegistrationFormData(BaseModel):
    """Form fields accumulated across all wizard steps."""

    model_config = ConfigDict(extra="forbid")

    userType: UserType | None = None
    firstName: str = ""
    lastName: str = ""
    email: str = ""
    phone: str = ""
    password: str = ""
    profileImage: str | None = None
    governorate: str = ""
    city: str = ""
    street: str = ""
    detailedAddress: str = ""


class WizardStep(Enum):
    ACCOUNT_TYPE = "account-type"
    PERSONAL_INFO = "personal-info"
    ADDRESS = "address"

    @property
    def number(self) -> int:
        return _STEP_ORDER.index(self) + 1

    def following(self) -> "WizardStep | None":
        position = _STEP_ORDER.index(self)
        if position + 1 < len(_STEP_ORDER):
            return _STEP_ORDER[position + 1]
        return None

    def preceding(self) -> "WizardStep | None":
        position = _STEP_ORDER.index(self)
        if position > 0:
            return _STEP_ORDER[position - 1]
        return None


_STEP_ORDER: Tuple[WizardStep, ...] = (
    WizardStep.ACCOUNT_TYPE,
    WizardStep.PERSONAL_INFO,
    WizardStep.ADDRESS,
)


class WizardEvent(Enum):
    NEXT = "next"
    PREV = "prev"


Rule = Tuple[Callable[[RegistrationFormData], bool], Notification]


def _destructive(title: str, description: str) -> Notification:
    return Notification(title=title, description=description, severity="destructive")


ACCOUNT_TYPE_MISSING = _destructive("اختر نوع الحساب", "يرجى اختيار نوع الحساب للمتابعة")
PERSONAL_INFO_INCOMPLETE = _destructive(
    "المعلومات غير مكتملة", "يرجى إدخال جميع المعلومات المطلوبة"
)
EMAIL_INVALID = _destructive("البريد الإلكتروني غير صالح", "يرجى إدخال بريد إلكتروني صحيح")
PHONE_INVALID = _destructive("رقم الهاتف غير صالح", "يرجى إدخال رقم هاتف مكون من 10 أرقام")
PASSWORD_TOO_SHORT = _destructive(
    "كلمة المرور قصيرة جداً", "يجب أن تكون كلمة المرور 8 أحرف على الأقل"
)
ADDRESS_INCOMPLETE = _destructive(
    "المعلومات غير مكتملة", "يرجى إدخال جميع معلومات العنوان المطلوبة"
)
SUBMISSION_FAILED = _destructive(
    "فشل إنشاء الحساب", "حدث خطأ أثناء التسجيل، يرجى المحاولة مرة أخرى"
)


def _personal_info_complete(form: RegistrationFormData) -> bool:
    return all((form.firstName, form.lastName, form.email, form.phone, form.password))


def _address_complete(form: RegistrationFormData) -> bool:
    return all((form.governorate, form.city, form.street, form.detailedAddress))


# Evaluated left to right; only the first failing rule is reported.
STEP_RULES: Dict[WizardStep, Tuple[Rule, ...]] = {
    WizardStep.ACCOUNT_TYPE: (
        (lambda form: form.userType is not None, ACCOUNT_TYPE_MISSING),
    ),
    WizardStep.PERSONAL_INFO: (
        (_personal_info_complete, PERSONAL_INFO_INCOMPLETE),
        (lambda form: EMAIL_PATTERN.fullmatch(form.email) is not None, EMAIL_INVALID),
        (lambda form: PHONE_PATTERN.fullmatch(form.phone) is not None, PHONE_INVALID),
        (lambda form: len(form.password) >= MIN_PASSWORD_LENGTH, PASSWORD_TOO_SHORT),
    ),
    WizardStep.ADDRESS: (
        (_address_complete, ADDRESS_INCOMPLETE),
    ),
}


def first_violation(step: WizardStep, form: RegistrationFormData) -> Notification | None:
    """Return the message of the first rule ``form`` breaks at ``step``."""

    for predicate, message in STEP_RULES[step]:
        if not predicate(form):
            return message
    return None


def validate_step(step: WizardStep, form: RegistrationFormData, notifier: Notifier) -> bool:
    violation = first_violation(step, form)
    if violation is None:
        return True
    record_validation_failure(step.value)
    notifier.notify(violation)
    return False


def transition(
    step: WizardStep,
    event: WizardEvent,
    form: RegistrationFormData,
    notifier: Notifier,
) -> WizardStep:
    """Return the step reached from ``step`` on ``event``.

    ``NEXT`` moves forward only when the current step validates and is a no-op
    on the last step, where submission takes over. ``PREV`` never validates.
    """

    if event is WizardEvent.PREV:
        return step.preceding() or step
    following = step.following()
    if following is None:
        return step
    if not validate_step(step, form, notifier):
        return step
    return following


AccountCreator = Callable[[RegistrationFormData], Awaitable[None]]
Navigator = Callable[[str], None]


class SimulatedAccountCreator:
    """Account creation stand-in that only waits before succeeding."""

    def __init__(self, delay_seconds: float = 1.5) -> None:
        self._delay_seconds = delay_seconds

    async def __call__(self, form: RegistrationFormData) -> None:
        await asyncio.sleep(self._delay_seconds)
        logger.info("account_created user_type=%s", form.userType)


def encode_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a self-contained ``data:`` URL."""

    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class RegistrationWizard:
    """Sequential registration flow holding one accumulating form record."""

    def __init__(
        self,
        *,
        create_account: AccountCreator,
        notifier: Notifier,
        navigate: Navigator,
        login_path: str = "/login",
    ) -> None:
        self._create_account = create_account
        self._notifier = notifier
        self._navigate = navigate
        self._login_path = login_path
        self.step = WizardStep.ACCOUNT_TYPE
        self.form = RegistrationFormData()
        self.loading = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        notifier: Notifier,
        navigate: Navigator,
        create_account: AccountCreator | None = None,
    ) -> "RegistrationWizard":
        """Build a wizard using the configured login path and submission delay."""

        return cls(
            create_account=create_account or SimulatedAccountCreator(settings.submit_delay_seconds),
            notifier=notifier,
            navigate=navigate,
            login_path=settings.login_path,
        )

    def select_user_type(self, user_type: UserType) -> None:
        self.update(userType=user_type)

    def update(self, **fields: object) -> None:
        """Set one or more form fields; other fields keep their values."""

        self.form = RegistrationFormData.model_validate({**self.form.model_dump(), **fields})

    def next(self) -> WizardStep:
        if not self.loading:
            self.step = transition(self.step, WizardEvent.NEXT, self.form, self._notifier)
        return self.step

    def prev(self) -> WizardStep:
        if not self.loading:
            self.step = transition(self.step, WizardEvent.PREV, self.form, self._notifier)
        return self.step

    async def attach_image(self, path: str | Path | None, *, mime_type: str | None = None) -> None:
        """Store the file at ``path`` as the profile image data URL.

        ``None`` leaves any previously attached image in place.
        """

        if path is None:
            return
        file_path = Path(path)
        data = await asyncio.to_thread(file_path.read_bytes)
        if mime_type is None:
            mime_type = mimetypes.guess_type(file_path.name)[0] or "application/octet-stream"
        self.update(profileImage=encode_data_url(data, mime_type))

    async def submit(self) -> bool:
        """Validate the address step and create the account.

        Returns ``True`` once the account exists and the login destination has
        been requested. Any failure leaves the wizard on the address step with
        every field intact.
        """

        if self.loading:
            logger.debug("submission_ignored reason=in_flight")
            return False
        if self.step is not WizardStep.ADDRESS:
            logger.debug("submission_ignored reason=step step=%s", self.step.value)
            return False
        if not validate_step(WizardStep.ADDRESS, self.form, self._notifier):
            return False

        self.loading = True
        try:
            await self._create_account(self.form)
            self._notifier.notify(
                Notification(
                    title="تم إنشاء الحساب بنجاح",
                    description=f"مرحباً {self.form.firstName}! يمكنك الآن تسجيل الدخول إلى منصة خدماتك",
                )
            )
            self._navigate(self._login_path)
        except Exception as exc:
            logger.warning("account_creation_failed error=%s", exc, exc_info=exc)
            record_submission("error")
            self._notifier.notify(SUBMISSION_FAILED)
            return False
        else:
            record_submission("success")
            return True
        finally:
            self.loading = False
