from django.apps import AppConfig  # type: ignore


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"
    label = "bookings"

    def ready(self) -> None:
        from apps.audit.services import CeleryAuditLog
        from apps.notifications.services import CeleryNotifier
        from apps.organizations.services import DjangoApprovalPolicySource, DjangoProfileDirectory
        from shared.application.message_bus import message_bus

        from .application.command_handlers import ApproverCheck
        from .handlers import ReservationAuditTrail, ReservationNotifications, register_event_handlers

        register_event_handlers(
            message_bus,
            ReservationNotifications(
                CeleryNotifier(),
                DjangoProfileDirectory(),
                ApproverCheck(DjangoApprovalPolicySource()),
            ),
            ReservationAuditTrail(CeleryAuditLog()),
        )
