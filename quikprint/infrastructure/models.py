# Database models of the infrastructure layer (authentication only).

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager

# ====================================================================
# CUSTOM USER MANAGER (e-mail as login)
# ====================================================================

class CustomUserManager(BaseUserManager):
    """
    Accounts are keyed by e-mail. Addresses are stored lowercased so
    "Ada@Example.com" and "ada@example.com" are the same customer.
    """
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError('An e-mail address is required')
        user = self.model(email=self.normalize_email(email).lower(), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        """Back-office account with every permission."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        for flag in ('is_staff', 'is_superuser'):
            if extra_fields.get(flag) is not True:
                raise ValueError(f'Superuser must have {flag}=True.')
        return self._create_user(email, password, **extra_fields)


# ====================================================================
# USER MODEL
# ====================================================================

class User(AbstractUser):
    """
    Custom user that logs in with 'email' instead of 'username'.
    Customers and back-office staff share this model (is_staff).
    """
    username = None

    email = models.EmailField('e-mail address', unique=True)
    phone = models.CharField(max_length=20, blank=True, null=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['first_name', 'last_name']

    objects = CustomUserManager()

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        db_table = 'infra_user'

    def __str__(self):
        return self.email
