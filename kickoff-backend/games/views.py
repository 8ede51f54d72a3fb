import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import game_store, registration_ledger, registration_service
from .checkin_service import check_in
from .models import Game
from .serializers import (
    CheckInSerializer,
    EtaSerializer,
    GameSerializer,
    GameStatusSerializer,
    RegistrationSerializer,
)

logger = logging.getLogger(__name__)


class IsStaffOrReadOnly(permissions.BasePermission):
    """Any signed-in user may read; only staff may write."""

    def has_permission(self, request, view):
        if not (request.user and request.user.is_authenticated):
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return bool(request.user.is_staff)


class CurrentGameView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        game = game_store.fetch_current_game()
        if game is None:
            return Response({"game": None, "registration": None})
        registration = registration_ledger.live_registration(game, request.user.id)
        return Response({
            "game": GameSerializer(game).data,
            "registration": RegistrationSerializer(registration).data if registration else None,
        })


class GameListCreateView(APIView):
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request):
        games = Game.objects.all()
        if request.query_params.get("upcoming") in {"1", "true"}:
            games = games.filter(status__in=Game.UPCOMING_STATUSES)
        serializer = GameSerializer(games.order_by("-date", "-kickoff_time")[:50], many=True)
        return Response(serializer.data)

    def post(self, request):
        serializer = GameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        game = serializer.save()
        return Response(GameSerializer(game).data, status=status.HTTP_201_CREATED)


class GameDetailView(APIView):
    permission_classes = [IsStaffOrReadOnly]

    def get(self, request, pk: int):
        return Response(GameSerializer(game_store.get_game(pk)).data)

    def delete(self, request, pk: int):
        game_store.delete_game(pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


class GameStatusView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk: int):
        serializer = GameStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        game = game_store.update_game_status(pk, serializer.validated_data["status"])
        return Response(GameSerializer(game).data)


class RegisterView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk: int):
        result = registration_service.with_conflict_retry(registration_service.register, request.user, pk)
        return Response(result.as_dict(), status=status.HTTP_201_CREATED)


class CancelRegistrationView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk: int):
        result = registration_service.with_conflict_retry(registration_service.cancel, request.user, pk)
        return Response(result.as_dict())


class RosterView(APIView):
    """Active players in sign-up order, then the standby queue in promotion order."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk: int):
        game = game_store.get_game(pk)
        active, standby = registration_ledger.roster(game)
        return Response({
            "game_id": game.id,
            "max_players": game.max_players,
            "max_standby": game.max_standby,
            "active_count": len(active),
            "standby_count": len(standby),
            "active": RegistrationSerializer(active, many=True).data,
            "standby": RegistrationSerializer(standby, many=True).data,
        })


class CheckInView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk: int):
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = check_in(request.user, pk, data["qr_secret"], data["latitude"], data["longitude"])
        return Response(result.as_dict())


class EtaView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk: int):
        serializer = EtaSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        registration = registration_service.with_conflict_retry(
            registration_service.report_eta, request.user, pk, serializer.validated_data["eta_minutes"]
        )
        return Response(RegistrationSerializer(registration).data)


class LateSwapView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk: int):
        result = registration_service.process_late_swaps(pk)
        logger.info("User %s ran late swaps for game %s: %s swaps", request.user.id, pk, result.swap_count)
        return Response(result.as_dict())


class NoShowView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk: int):
        count = registration_service.mark_no_shows(pk)
        return Response({"game_id": pk, "no_show_count": count})
