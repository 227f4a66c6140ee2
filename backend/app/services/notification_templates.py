"""
Rendering of well-being notification emails (pt-BR).
"""
from html import escape
from typing import Optional

from app.core.utils import format_date_br
from app.schemas.notification import (
    EmailMessage, NotificationDecision, NotificationReason, TriggerKind, UserIdentity
)

SIGNATURE = "<br><p>Atenciosamente,</p><p>Equipe Equilibrius</p>"


def describe_low_mood(mood_value: int) -> str:
    if mood_value == 1:
        return "muito baixo (1 - pior possível)"
    return f"baixo ({mood_value})"


def render_notification(
    identity: UserIdentity,
    decision: NotificationDecision,
    trigger: TriggerKind,
    contact_name: Optional[str] = None,
    is_yesterday: bool = True,
) -> EmailMessage:
    """Build the message a support contact receives about `identity`."""
    if not decision.should_notify:
        raise ValueError("Cannot render a notification for a decision without a reason")

    name = escape(identity.display_name)
    greeting = f"<p>Olá {escape(contact_name) if contact_name else 'Familiar'},</p>"
    day = format_date_br(decision.reference_date)

    if trigger == TriggerKind.EVENT and decision.reason == NotificationReason.LOW_MOOD:
        subject = f"Alerta de bem-estar: {identity.display_name} registrou um humor baixo"
        body = (
            f"{greeting}"
            "<p><strong>Este é um alerta automático do app Equilibrius.</strong></p>"
            f"<p>{name} acabou de registrar um humor {describe_low_mood(decision.mood_value)} "
            f"para o dia {day}.</p>"
            f"<p>Esta é uma indicação de que {name} pode estar passando por um momento "
            "difícil e precisando de apoio.</p>"
            "<br><p><strong>O que você pode fazer:</strong></p>"
            "<ul>"
            f"<li>Entre em contato com {name}</li>"
            "<li>Ofereça apoio emocional</li>"
            "<li>Verifique se há necessidade de ajuda profissional</li>"
            "</ul>"
            f"{SIGNATURE}"
        )
        return EmailMessage(subject=subject, html=body)

    when = f"ontem ({day})" if is_yesterday else f"em {day}"
    if decision.reason == NotificationReason.NO_ENTRY:
        reason = f"{name} não registrou seu humor {when}."
    else:
        reason = f"{name} registrou um humor {describe_low_mood(decision.mood_value)} {when}."

    scale = ""
    if decision.mood_value is not None:
        scale = (
            f"<p>Humor registrado: {decision.mood_value} "
            "(numa escala de 1 a 5, sendo 1 o mais baixo).</p>"
        )

    subject = f"Atualização sobre o bem-estar de {identity.display_name}"
    body = (
        f"{greeting}"
        "<p>Este é um contato do app Equilibrius.</p>"
        f"<p>{reason}</p>"
        f"{scale}"
        "<p>Sugerimos que você entre em contato para oferecer seu apoio.</p>"
        f"{SIGNATURE}"
    )
    return EmailMessage(subject=subject, html=body)
