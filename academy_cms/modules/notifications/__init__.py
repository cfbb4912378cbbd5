from .mailer import LoggingMailer, MailDeliveryError, Mailer, SmtpMailer, build_mailer

__all__ = ["LoggingMailer", "MailDeliveryError", "Mailer", "SmtpMailer", "build_mailer"]
