import logging
import smtplib
from email.message import EmailMessage

from .. import config

logger = logging.getLogger(__name__)


def _send(*, to_email: str, subject: str, lines: list[str]) -> None:
    """
    Send a plain-text email over SMTP (Gmail App Password recommended).

    Env vars:
      SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_TLS
    """
    host, port = config.SMTP_HOST, config.SMTP_PORT
    user, password = config.SMTP_USER, config.SMTP_PASS
    mail_from = config.SMTP_FROM or user

    if not host or not user or not password or not mail_from:
        raise RuntimeError("SMTP is not configured (missing SMTP_HOST/SMTP_USER/SMTP_PASS/SMTP_FROM).")

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = mail_from
    msg["To"] = to_email
    msg.set_content("\n".join(lines))

    logger.debug("Connecting to %s:%s (TLS=%s)", host, port, config.SMTP_TLS)
    with smtplib.SMTP(host, port, timeout=15) as smtp:
        smtp.ehlo()
        if config.SMTP_TLS:
            smtp.starttls()
            smtp.ehlo()
        smtp.login(user, password)
        smtp.send_message(msg)
    logger.info("Email '%s' sent to %s", subject, to_email)


def _when(session: dict) -> str:
    return f"{session.get('date')} {session.get('start_time')} - {session.get('end_time')}"


def send_interview_scheduled_email(*, to_email: str, session: dict) -> None:
    cand = (session.get("candidate_name") or "Candidate").strip()
    interviewer = (session.get("interviewer_name") or "your interviewer").strip()

    lines = [
        f"Dear {cand},",
        "",
        "Your interview has been scheduled.",
        "",
        f"When: {_when(session)}",
        f"Interviewer: {interviewer}",
    ]
    if session.get("interviewer_email"):
        lines.append(f"Interviewer email: {session['interviewer_email']}")
    lines += [
        "",
        "The meeting link will be shared by the interviewer before the scheduled time.",
        "Please be online 5 minutes early.",
        "",
        "Best regards,",
        "Placement Team",
    ]
    _send(to_email=to_email, subject="Interview Scheduled", lines=lines)


def send_interviewer_assignment_email(*, to_email: str, session: dict) -> None:
    interviewer = (session.get("interviewer_name") or "Interviewer").strip()

    lines = [
        f"Dear {interviewer},",
        "",
        "A new interview has been scheduled with you.",
        "",
        f"Candidate: {session.get('candidate_name') or 'N/A'}",
        f"Candidate email: {session.get('candidate_email') or 'N/A'}",
        f"Mobile: {session.get('candidate_mobile') or 'N/A'}",
        f"College: {session.get('candidate_college') or 'N/A'}",
        f"When: {_when(session)}",
        "",
        "Please add the meeting link before the scheduled time.",
        "",
        "Best regards,",
        "HR Team",
    ]
    _send(to_email=to_email, subject="New Interview Scheduled", lines=lines)


def send_interview_cancelled_email(*, to_email: str, session: dict) -> None:
    cand = (session.get("candidate_name") or "Candidate").strip()
    lines = [
        f"Dear {cand},",
        "",
        f"Your interview on {_when(session)} has been cancelled.",
        "HR will contact you if it is rescheduled.",
        "",
        "Best regards,",
        "Placement Team",
    ]
    _send(to_email=to_email, subject="Interview Cancelled", lines=lines)
