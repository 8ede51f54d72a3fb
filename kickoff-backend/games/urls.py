from django.urls import path

from .views import (
    CancelRegistrationView,
    CheckInView,
    CurrentGameView,
    EtaView,
    GameDetailView,
    GameListCreateView,
    GameStatusView,
    LateSwapView,
    NoShowView,
    RegisterView,
    RosterView,
)

urlpatterns = [
    path("", GameListCreateView.as_view(), name="games"),
    path("current/", CurrentGameView.as_view(), name="game-current"),
    path("<int:pk>/", GameDetailView.as_view(), name="game-detail"),
    path("<int:pk>/status/", GameStatusView.as_view(), name="game-status"),
    path("<int:pk>/register/", RegisterView.as_view(), name="game-register"),
    path("<int:pk>/cancel/", CancelRegistrationView.as_view(), name="game-cancel"),
    path("<int:pk>/registrations/", RosterView.as_view(), name="game-registrations"),
    path("<int:pk>/check-in/", CheckInView.as_view(), name="game-check-in"),
    path("<int:pk>/eta/", EtaView.as_view(), name="game-eta"),
    path("<int:pk>/late-swaps/", LateSwapView.as_view(), name="game-late-swaps"),
    path("<int:pk>/no-shows/", NoShowView.as_view(), name="game-no-shows"),
]
