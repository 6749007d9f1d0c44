"""
Mail Adapter - SMTP delivery and a logging fallback.
"""

from .mailer import LoggingMailer, SmtpMailer

__all__ = ["SmtpMailer", "LoggingMailer"]
