# service/emailer.py
from __future__ import annotations

import os
import smtplib
import ssl
import time
import uuid
from collections.abc import Iterable
from email.message import EmailMessage
from email.utils import formatdate, make_msgid

# ---- Errors -----------------------------------------------------------------


class EmailSendError(RuntimeError):
    """Raised when an email cannot be delivered."""


# ---- Env / Settings ----------------------------------------------------------


def _getenv_any(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v != "":
            return v
    return default


def _resolve_smtp_settings() -> dict:
    """
    Resolve SMTP settings from env. Defaults target Gmail with an app password.

      SMTP_HOST / SMTP_PORT                 (smtp.gmail.com / 587)
      SMTP_USERNAME or GMAIL_USER
      SMTP_PASSWORD or GMAIL_APP_PASSWORD
      SMTP_FROM                             (defaults to the username)
      SMTP_USE_SSL = "true" | "false"
      SMTP_STARTTLS = "true" | "false" | "auto" (default)
    """
    host = _getenv_any("SMTP_HOST", default="smtp.gmail.com")
    port = int(_getenv_any("SMTP_PORT", default="587") or 587)

    username = _getenv_any("SMTP_USERNAME", "GMAIL_USER")
    password = _getenv_any("SMTP_PASSWORD", "GMAIL_APP_PASSWORD")

    use_ssl = (_getenv_any("SMTP_USE_SSL", default="false") or "false").strip().lower() == "true"
    starttls = (_getenv_any("SMTP_STARTTLS", default="auto") or "auto").strip().lower()
    if use_ssl:
        starttls = "false"

    return {
        "host": host,
        "port": port,
        "username": username,
        "password": password,
        "use_ssl": use_ssl,
        "starttls": starttls,  # "true" | "false" | "auto"
        "from_addr": _getenv_any("SMTP_FROM", default=username or ""),
    }


# ---- Helpers ----------------------------------------------------------------


def _as_list(values: Iterable[str] | str | None) -> list[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = values.split(",")
    return [v for v in (s.strip() for s in values) if v]


def _should_starttls(port: int, starttls_setting: str) -> bool:
    if starttls_setting == "true":
        return True
    if starttls_setting == "false":
        return False
    # "auto": plain relay ports stay cleartext
    return port not in (25, 2525)


def build_message(*, subject: str, html: str, to: list[str], from_addr: str) -> EmailMessage:
    if not subject or not subject.strip():
        raise EmailSendError("Missing subject.")
    if not html or not html.strip():
        raise EmailSendError("Missing HTML body.")
    if not to:
        raise EmailSendError("No recipients.")
    if not from_addr:
        raise EmailSendError("No from address resolved. Set SMTP_FROM or SMTP_USERNAME/GMAIL_USER.")

    msg = EmailMessage()
    msg["From"] = from_addr
    msg["To"] = ", ".join(to)
    msg["Subject"] = subject
    msg["Date"] = formatdate(localtime=True)
    msg["Message-ID"] = make_msgid()
    msg["X-Mailer-Nonce"] = uuid.uuid4().hex

    msg.set_content("New job postings detected. Open this message in an HTML-capable client.")
    msg.add_alternative(html, subtype="html", charset="utf-8")
    return msg


def _send_via_smtp(msg: EmailMessage, *, rcpt_to: list[str], settings: dict) -> None:
    host = settings["host"]
    port = settings["port"]
    username = settings["username"]
    password = settings["password"]
    use_ssl = settings["use_ssl"]

    if not (host and username and password):
        raise EmailSendError("Missing SMTP credentials or host. Expected SMTP_USERNAME/SMTP_PASSWORD (or GMAIL_*).")

    context = ssl.create_default_context()
    try:
        server = smtplib.SMTP_SSL(host, port, context=context) if use_ssl else smtplib.SMTP(host, port)
        with server:
            server.ehlo()
            if not use_ssl and _should_starttls(port, settings["starttls"]):
                server.starttls(context=context)
                server.ehlo()
            server.login(username, password)
            server.send_message(msg, to_addrs=rcpt_to)
    except smtplib.SMTPServerDisconnected as e:
        raise EmailSendError(f"SMTP transient failure: {e}") from e
    except smtplib.SMTPResponseException as e:
        kind = "transient" if 400 <= e.smtp_code < 500 else "permanent"
        raise EmailSendError(f"SMTP {kind} failure {e.smtp_code}: {e.smtp_error!r}") from e
    except (smtplib.SMTPException, OSError) as e:
        raise EmailSendError(f"SMTP send failed: {e}") from e


# ---- Public API --------------------------------------------------------------


def send_html(*, subject: str, html: str, to: Iterable[str] | str | None, attempts: int = 3) -> str:
    """
    Send an HTML email.

    Returns:
        message_id (str): RFC-822 Message-ID generated by the sender.

    Raises:
        EmailSendError on any failure. Only 4xx / disconnect failures are retried
        (1s, 2s, ...); everything else surfaces immediately.
    """
    settings = _resolve_smtp_settings()
    rcpt_to = _as_list(to)
    msg = build_message(subject=subject, html=html, to=rcpt_to, from_addr=(settings["from_addr"] or "").strip())

    for attempt in range(attempts):
        try:
            _send_via_smtp(msg, rcpt_to=rcpt_to, settings=settings)
            return str(msg["Message-ID"])
        except EmailSendError as e:  # noqa: PERF203
            if "transient" not in str(e) or attempt == attempts - 1:
                raise
            time.sleep(2**attempt)
    raise EmailSendError("Permanent send failure after retries")
