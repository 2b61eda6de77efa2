# quikprint/presentation/views_auth.py

import logging

from django.contrib.auth import logout
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .cart_manager import CartManager
from .serializers import RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


# ====================================================================
# ACCOUNT VIEWS (token obtain/refresh come from SimpleJWT)
# ====================================================================

class RegisterView(generics.CreateAPIView):
    """Creates a customer account; sign in afterwards through /auth/token/."""
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("New customer account %s.", user.email)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


class MeView(generics.RetrieveUpdateAPIView):
    """The signed-in user's profile."""
    serializer_class = UserSerializer
    permission_classes = [IsAuthenticated]
    http_method_names = ['get', 'patch', 'head', 'options']

    def get_object(self):
        return self.request.user


class LogoutView(APIView):
    """
    Ends the session: blacklists the refresh token when one is sent and
    always empties the session cart, signed in or not.
    """
    permission_classes = [AllowAny]

    @extend_schema(request=None, responses=None)
    def post(self, request):
        refresh = request.data.get('refresh') if hasattr(request.data, 'get') else None
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except TokenError:
                logger.warning("Logout with an invalid or expired refresh token.")

        CartManager(request).clear()
        logout(request)
        return Response({'message': 'Signed out.'}, status=status.HTTP_200_OK)
