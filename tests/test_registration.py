import asyncio

import pytest

from khadamat.config import Settings
from khadamat.notifications import RecordingNotifier
from khadamat.registration import (
    ACCOUNT_TYPE_MISSING,
    ADDRESS_INCOMPLETE,
    EMAIL_INVALID,
    PASSWORD_TOO_SHORT,
    PERSONAL_INFO_INCOMPLETE,
    PHONE_INVALID,
    SUBMISSION_FAILED,
    RegistrationFormData,
    RegistrationWizard,
    SimulatedAccountCreator,
    WizardEvent,
    WizardStep,
    first_violation,
    transition,
)

VALID_PERSONAL_INFO = {
    "firstName": "Lina",
    "lastName": "Haddad",
    "email": "lina@example.com",
    "phone": "0912345678",
    "password": "s3cretpass",
}

VALID_ADDRESS = {
    "governorate": "damascus",
    "city": "Damascus",
    "street": "Baghdad St",
    "detailedAddress": "Building 4, floor 2",
}


class RecordingCreator:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self._error = error

    async def __call__(self, form):
        self.calls.append(form)
        await asyncio.sleep(0)
        if self._error:
            raise self._error


def build_wizard(creator=None):
    notifier = RecordingNotifier()
    destinations = []
    wizard = RegistrationWizard(
        create_account=creator or RecordingCreator(),
        notifier=notifier,
        navigate=destinations.append,
    )
    return wizard, notifier, destinations


def advance_to_address(wizard):
    wizard.select_user_type("provider")
    wizard.next()
    wizard.update(**VALID_PERSONAL_INFO)
    wizard.next()
    assert wizard.step is WizardStep.ADDRESS


def test_next_requires_user_type():
    wizard, notifier, _ = build_wizard()

    assert wizard.next() is WizardStep.ACCOUNT_TYPE
    assert notifier.last == ACCOUNT_TYPE_MISSING

    wizard.select_user_type("customer")
    assert wizard.step is WizardStep.ACCOUNT_TYPE
    assert wizard.next() is WizardStep.PERSONAL_INFO
    assert wizard.step.number == 2


def test_personal_info_rejects_bad_email():
    wizard, notifier, _ = build_wizard()
    wizard.select_user_type("customer")
    wizard.next()

    wizard.update(**{**VALID_PERSONAL_INFO, "email": "bad"})
    assert wizard.next() is WizardStep.PERSONAL_INFO
    assert notifier.last == EMAIL_INVALID

    wizard.update(email="lina@example.com")
    assert wizard.next() is WizardStep.ADDRESS


@pytest.mark.parametrize(
    "overrides,expected",
    [
        ({"firstName": ""}, PERSONAL_INFO_INCOMPLETE),
        ({"firstName": "", "email": "bad", "phone": "1"}, PERSONAL_INFO_INCOMPLETE),
        ({"email": "bad", "phone": "1", "password": "x"}, EMAIL_INVALID),
        ({"email": "a b@c.d"}, EMAIL_INVALID),
        ({"phone": "12345", "password": "x"}, PHONE_INVALID),
        ({"phone": "091234567a"}, PHONE_INVALID),
        ({"password": "short"}, PASSWORD_TOO_SHORT),
        ({"phone": "٠٩١٢٣٤٥٦٧٨"}, PHONE_INVALID),
        ({"phone": "0912345678\n"}, PHONE_INVALID),
        ({"email": "a@b.co\n"}, EMAIL_INVALID),
        ({}, None),
    ],
)
def test_personal_info_reports_first_failing_rule(overrides, expected):
    form = RegistrationFormData(userType="provider", **{**VALID_PERSONAL_INFO, **overrides})
    assert first_violation(WizardStep.PERSONAL_INFO, form) == expected


def test_address_image_is_optional():
    form = RegistrationFormData(**VALID_ADDRESS)
    assert form.profileImage is None
    assert first_violation(WizardStep.ADDRESS, form) is None
    assert first_violation(WizardStep.ADDRESS, form.model_copy(update={"city": ""})) == ADDRESS_INCOMPLETE


def test_prev_keeps_entered_fields():
    wizard, _, _ = build_wizard()
    advance_to_address(wizard)
    wizard.update(governorate="homs", city="Homs")

    assert wizard.prev() is WizardStep.PERSONAL_INFO
    assert wizard.form.governorate == "homs"
    assert wizard.form.city == "Homs"
    assert wizard.form.email == VALID_PERSONAL_INFO["email"]

    assert wizard.prev() is WizardStep.ACCOUNT_TYPE
    assert wizard.prev() is WizardStep.ACCOUNT_TYPE
    assert wizard.form.userType == "provider"


def test_transition_is_total():
    notifier = RecordingNotifier()
    form = RegistrationFormData()
    for step in WizardStep:
        for event in WizardEvent:
            assert isinstance(transition(step, event, form, notifier), WizardStep)
    assert transition(WizardStep.ADDRESS, WizardEvent.NEXT, form, notifier) is WizardStep.ADDRESS
    assert notifier.records == [ACCOUNT_TYPE_MISSING, PERSONAL_INFO_INCOMPLETE]


@pytest.mark.asyncio
async def test_submit_success_navigates_to_login():
    creator = RecordingCreator()
    wizard, notifier, destinations = build_wizard(creator)
    advance_to_address(wizard)
    wizard.update(**VALID_ADDRESS)

    assert await wizard.submit() is True
    assert destinations == ["/login"]
    assert creator.calls[0].email == "lina@example.com"
    assert creator.calls[0].detailedAddress == VALID_ADDRESS["detailedAddress"]
    assert "Lina" in notifier.last.description
    assert notifier.last.severity == "default"
    assert wizard.loading is False


@pytest.mark.asyncio
async def test_submit_requires_address():
    creator = RecordingCreator()
    wizard, notifier, destinations = build_wizard(creator)
    advance_to_address(wizard)

    assert await wizard.submit() is False
    assert notifier.last == ADDRESS_INCOMPLETE
    assert creator.calls == []
    assert destinations == []


@pytest.mark.asyncio
async def test_submit_failure_keeps_state():
    creator = RecordingCreator(error=RuntimeError("boom"))
    wizard, notifier, destinations = build_wizard(creator)
    advance_to_address(wizard)
    wizard.update(**VALID_ADDRESS)
    snapshot = wizard.form.model_dump()

    assert await wizard.submit() is False
    assert notifier.last == SUBMISSION_FAILED
    assert destinations == []
    assert wizard.loading is False
    assert wizard.step is WizardStep.ADDRESS
    assert wizard.form.model_dump() == snapshot


@pytest.mark.asyncio
async def test_second_submission_is_blocked_while_loading():
    wizard, _, destinations = build_wizard(SimulatedAccountCreator(delay_seconds=0.05))
    advance_to_address(wizard)
    wizard.update(**VALID_ADDRESS)

    first = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)
    assert wizard.loading is True
    assert wizard.prev() is WizardStep.ADDRESS

    assert await wizard.submit() is False
    assert await first is True
    assert destinations == ["/login"]


@pytest.mark.asyncio
async def test_attach_image_encodes_data_url(tmp_path):
    wizard, _, _ = build_wizard()
    image = tmp_path / "avatar.png"
    image.write_bytes(b"\x89PNG")

    await wizard.attach_image(image)
    assert wizard.form.profileImage == "data:image/png;base64,iVBORw=="

    await wizard.attach_image(None)
    assert wizard.form.profileImage == "data:image/png;base64,iVBORw=="


@pytest.mark.asyncio
async def test_wizard_from_settings_uses_configured_destination():
    settings = Settings(KHADAMAT_LOGIN_PATH="/auth/login", KHADAMAT_SUBMIT_DELAY=0)
    destinations = []
    wizard = RegistrationWizard.from_settings(
        settings,
        notifier=RecordingNotifier(),
        navigate=destinations.append,
    )
    advance_to_address(wizard)
    wizard.update(**VALID_ADDRESS)

    assert await wizard.submit() is True
    assert destinations == ["/auth/login"]


@pytest.mark.asyncio
async def test_navigation_failure_reports_submission_failure():
    notifier = RecordingNotifier()

    def broken_navigate(destination):
        raise RuntimeError("router unavailable")

    wizard = RegistrationWizard(
        create_account=RecordingCreator(),
        notifier=notifier,
        navigate=broken_navigate,
    )
    advance_to_address(wizard)
    wizard.update(**VALID_ADDRESS)

    assert await wizard.submit() is False
    assert notifier.last == SUBMISSION_FAILED
    assert wizard.loading is False
    assert wizard.step is WizardStep.ADDRESS
