"""User API views."""

from __future__ import annotations

from rest_framework import permissions, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from .serializers import UserSerializer


class UserViewSet(viewsets.GenericViewSet):
    """Profile endpoint for the signed-in user.

    Accounts are created by staff through the admin, so only ``me`` is exposed.
    """

    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated]

    @action(detail=False, methods=["get"])
    def me(self, request):
        """Return the current user's profile with loyalty tier and discount rate."""
        serializer = UserSerializer(request.user)
        return Response(serializer.data)
