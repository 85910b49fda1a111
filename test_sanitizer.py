import pytest

from messenger.core.errors import ValidationFailed
from messenger.schemas.message import MessageSendRequest
from messenger.security.sanitizer import InputSanitizer


def test_content_is_trimmed_and_escaped():
    value = InputSanitizer.sanitize_content("  <script>alert('x')</script> & more  ")
    assert value == "&lt;script&gt;alert(&#x27;x&#x27;)&lt;&#x2F;script&gt; &amp; more"


def test_plain_text_passes_through():
    assert InputSanitizer.sanitize_content("hello there") == "hello there"


@pytest.mark.parametrize("value", ["", "   ", "\n\t", None, 42])
def test_blank_or_non_text_content_is_rejected(value):
    with pytest.raises(ValueError, match="cannot be empty"):
        InputSanitizer.sanitize_content(value)


def test_length_is_measured_after_trimming():
    assert len(InputSanitizer.sanitize_content("  " + "a" * 500 + "  ")) == 500
    with pytest.raises(ValueError, match="cannot exceed 500"):
        InputSanitizer.sanitize_content("a" * 501)


def test_length_is_measured_before_escaping():
    escaped = InputSanitizer.sanitize_content("<" * 500)
    assert escaped == "&lt;" * 500


def test_send_request_collects_every_field_error():
    with pytest.raises(ValidationFailed) as excinfo:
        MessageSendRequest.parse_payload({"content": "   "})

    errors = {e["field"]: e["message"] for e in excinfo.value.errors}
    assert errors == {
        "receiverId": "Receiver ID is required",
        "content": "Message content cannot be empty",
    }


def test_send_request_sanitizes_fields():
    req = MessageSendRequest.parse_payload({"receiverId": "  abc  ", "content": " <b>hi</b> "})
    assert req.receiver_id == "abc"
    assert req.content == "&lt;b&gt;hi&lt;&#x2F;b&gt;"


@pytest.mark.parametrize("body", [None, [], "text"])
def test_send_request_requires_an_object(body):
    with pytest.raises(ValidationFailed) as excinfo:
        MessageSendRequest.parse_payload(body)
    assert excinfo.value.errors[0]["field"] == "body"


@pytest.mark.parametrize("value,message", [
    (None, "Receiver ID is required"),
    ("   ", "Receiver ID is required"),
    (123, "Receiver ID must be a string"),
    (["abc"], "Receiver ID must be a string"),
])
def test_receiver_id_errors(value, message):
    with pytest.raises(ValueError, match=message):
        InputSanitizer.sanitize_receiver_id(value)


def test_numeric_receiver_id_is_reported_as_wrong_type():
    with pytest.raises(ValidationFailed) as excinfo:
        MessageSendRequest.parse_payload({"receiverId": 123, "content": "hi"})
    assert excinfo.value.errors == [{"field": "receiverId", "message": "Receiver ID must be a string"}]
