"""
Seed a game near kickoff with synthetic players, for exercising late swaps
and check-in by hand: active players have not checked in, standby players have.
"""
from datetime import timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from games import game_store
from games.models import Game, Registration

User = get_user_model()


class Command(BaseCommand):
    help = "Create an open game starting soon with synthetic active and standby registrations"

    def add_arguments(self, parser):
        parser.add_argument("--active", type=int, default=None, help="Active players (default: max players)")
        parser.add_argument("--standby", type=int, default=3, help="Checked-in standby players (default: 3)")
        parser.add_argument("--max-players", type=int, default=settings.DEFAULT_MAX_PLAYERS)
        parser.add_argument("--max-standby", type=int, default=settings.DEFAULT_MAX_STANDBY)
        parser.add_argument("--kickoff-in", type=int, default=10, help="Minutes until kickoff (default: 10)")

    def _player(self, index):
        user, created = User.objects.get_or_create(
            email=f"test_player_{index}@example.com",
            defaults={"username": f"test_player_{index}", "full_name": f"Test Player {index}"},
        )
        if created:
            user.set_unusable_password()
            user.save(update_fields=["password"])
        return user

    def handle(self, *args, **options):
        max_players = options["max_players"]
        max_standby = options["max_standby"]
        active = max_players if options["active"] is None else options["active"]
        standby = options["standby"]
        if active < 0 or standby < 0:
            raise CommandError("Player counts must not be negative.")
        if active > max_players:
            raise CommandError(f"--active {active} exceeds --max-players {max_players}.")
        if standby > max_standby:
            raise CommandError(f"--standby {standby} exceeds --max-standby {max_standby}.")

        kickoff = timezone.now() + timedelta(minutes=options["kickoff_in"])
        with transaction.atomic():
            game = game_store.create_game(
                date=timezone.localdate(kickoff),
                kickoff_time=kickoff,
                deadline_time=kickoff,
                max_players=max_players,
                max_standby=max_standby,
                status=Game.STATUS_OPEN_FOR_ALL,
                is_auto_generated=False,
            )
            for index in range(1, active + 1):
                Registration.objects.create(
                    game=game,
                    user=self._player(index),
                    status=Registration.STATUS_ACTIVE,
                    check_in_status=Registration.CHECK_IN_PENDING,
                )
            for position in range(1, standby + 1):
                Registration.objects.create(
                    game=game,
                    user=self._player(active + position),
                    status=Registration.STATUS_STANDBY,
                    queue_position=position,
                    check_in_status=Registration.CHECK_IN_CHECKED_IN,
                    checked_in_at=timezone.now(),
                )

        self.stdout.write(self.style.SUCCESS(
            f"Created game {game.id} kicking off at {timezone.localtime(kickoff):%H:%M} "
            f"with {active} active and {standby} standby players"
        ))
