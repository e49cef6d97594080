"""
Team invitation email template.
"""

from libs.common.config import get_settings
from libs.common.emails.core import send_email


async def send_invitation_email(
    to_email: str,
    invite_url: str,
    team_name: str,
    inviter_name: str,
    role: str,
) -> bool:
    """
    Send the email inviting someone to join a store's team.
    """
    settings = get_settings()
    inviter = inviter_name or "A team member"
    subject = f"You've been invited to join {team_name} on {settings.APP_NAME}"

    body = f"""Hi,

{inviter} has invited you to join {team_name} as a {role} on {settings.APP_NAME}.

Accept the invitation here:
{invite_url}

This invitation will expire in {settings.INVITATION_TTL_DAYS} days.
If you don't have an account, you'll be able to create one when you accept the invitation.

If you didn't expect this invitation, you can safely ignore this email.
"""

    html_body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2>You've been invited!</h2>
  <p>{inviter} has invited you to join {team_name} as a {role} on {settings.APP_NAME}.</p>
  <p>Click the button below to accept this invitation:</p>
  <div style="text-align: center; margin: 30px 0;">
    <a href="{invite_url}" style="background-color: #0070f3; color: white; padding: 12px 20px; text-decoration: none; border-radius: 4px; font-weight: bold;">
      Accept Invitation
    </a>
  </div>
  <p>This invitation will expire in {settings.INVITATION_TTL_DAYS} days.</p>
  <hr style="margin: 30px 0; border: none; border-top: 1px solid #eaeaea;" />
  <p style="color: #666; font-size: 14px;">
    If you didn't expect this invitation, you can safely ignore this email.
  </p>
</div>
"""

    return await send_email(
        to_email=to_email,
        subject=subject,
        body=body,
        html_body=html_body,
    )
