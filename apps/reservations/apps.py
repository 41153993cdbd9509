from django.apps import AppConfig  # type: ignore


class ReservationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.reservations"
    label = "reservations"
    verbose_name = "Reservations"

    def ready(self):
        from .handlers import register_event_handlers

        register_event_handlers()
