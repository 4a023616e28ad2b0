"""Print a ticket's activity timeline to the console."""
from __future__ import annotations

from django.core.exceptions import ValidationError
from django.core.management.base import BaseCommand, CommandError

from tickets.models import Ticket
from tickets.services import ticket_timeline
from tickets.timeline import render_lines


class Command(BaseCommand):
    help = "Print the activity timeline of a ticket, newest first."

    def add_arguments(self, parser) -> None:
        parser.add_argument("ticket_id")

    def handle(self, *args, **options) -> None:
        try:
            ticket = Ticket.objects.filter(pk=options["ticket_id"]).first()
        except ValidationError:
            raise CommandError(f"Malformed ticket id {options['ticket_id']}")
        if ticket is None:
            raise CommandError(f"Ticket {options['ticket_id']} does not exist")
        for line in render_lines(ticket_timeline(ticket)):
            self.stdout.write(line)
