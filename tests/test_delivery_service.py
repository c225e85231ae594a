import pytest

from federation_portal.application.services.delivery_service import (
    DeliveryDispatcher,
    NO_TELEGRAM_BINDING,
    render_message,
    SMS_MESSAGES,
)
from conftest import FakeChatDirectory, FakeSms, FakeTelegram

PHONE = "+996700123456"


def make_dispatcher(bindings=None, telegram=None, sms=None):
    return DeliveryDispatcher(
        chat_directory=FakeChatDirectory(bindings),
        telegram=telegram or FakeTelegram(),
        sms=sms or FakeSms(),
    )


@pytest.mark.asyncio
async def test_auto_without_binding_falls_back_to_sms():
    sms = FakeSms()
    telegram = FakeTelegram()
    result = await make_dispatcher(telegram=telegram, sms=sms).deliver(PHONE, "123456", "ru", "auto")

    assert result.success is True
    assert result.method == "sms"
    assert telegram.sent == []
    assert sms.sent == [(PHONE, "GTF: Ваш код: 123456")]


@pytest.mark.asyncio
async def test_auto_prefers_telegram_when_linked():
    sms = FakeSms()
    telegram = FakeTelegram()
    dispatcher = make_dispatcher({PHONE: "42"}, telegram=telegram, sms=sms)

    result = await dispatcher.deliver(PHONE, "123456", "en", "auto")

    assert result.success is True
    assert result.method == "telegram"
    assert telegram.sent[0][0] == "42"
    assert "123456" in telegram.sent[0][1]
    assert "5 minutes" in telegram.sent[0][1]
    assert sms.sent == []


@pytest.mark.asyncio
async def test_auto_falls_back_when_telegram_fails():
    sms = FakeSms()
    dispatcher = make_dispatcher({PHONE: "42"}, telegram=FakeTelegram(fail=True), sms=sms)

    result = await dispatcher.deliver(PHONE, "123456", "en", "auto")

    assert result.success is True
    assert result.method == "sms"
    assert sms.sent == [(PHONE, "GTF: Your code: 123456")]


@pytest.mark.asyncio
async def test_telegram_only_without_binding_fails():
    sms = FakeSms()
    result = await make_dispatcher(sms=sms).deliver(PHONE, "123456", "ru", "telegram")

    assert result.success is False
    assert result.method == "telegram"
    assert result.error == NO_TELEGRAM_BINDING
    assert sms.sent == []


@pytest.mark.asyncio
async def test_sms_only_skips_telegram():
    telegram = FakeTelegram()
    result = await make_dispatcher({PHONE: "42"}, telegram=telegram).deliver(PHONE, "123456", None, "sms")

    assert result.success is True
    assert result.method == "sms"
    assert telegram.sent == []


@pytest.mark.asyncio
async def test_sms_failure_reports_user_facing_error():
    result = await make_dispatcher(sms=FakeSms(fail=True)).deliver(PHONE, "123456", "ru", "sms")
    assert result.success is False
    assert result.error == "Failed to send SMS"


@pytest.mark.asyncio
async def test_unknown_method_is_rejected():
    with pytest.raises(ValueError):
        await make_dispatcher().deliver(PHONE, "123456", "ru", "pigeon")


def test_render_message_falls_back_to_default_locale():
    assert render_message(SMS_MESSAGES, "fr", "123456", 5) == "GTF: Ваш код: 123456"
    assert render_message(SMS_MESSAGES, "uz", "123456", 5) == "GTF: Kodingiz: 123456"


@pytest.mark.asyncio
async def test_unconfigured_channels_raise_delivery_error():
    from federation_portal.application.ports.message_channel import DeliveryError
    from federation_portal.infrastructure.messaging.sms.nikita_provider import NikitaSmsProvider
    from federation_portal.infrastructure.messaging.sms.twilio_provider import TwilioSmsProvider
    from federation_portal.infrastructure.messaging.telegram_bot import TelegramBotSender

    with pytest.raises(DeliveryError):
        await TelegramBotSender(bot_token="").send("42", "hi")
    with pytest.raises(DeliveryError):
        await NikitaSmsProvider(api_key="", sender="GTF").send(PHONE, "hi")
    with pytest.raises(DeliveryError):
        await TwilioSmsProvider(account_sid="", auth_token="", from_number="").send(PHONE, "hi")
