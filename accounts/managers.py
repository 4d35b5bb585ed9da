from django.contrib.auth.models import BaseUserManager

from distribucion.choices import AccesoSistema


class UserManager(BaseUserManager):
    """Alta de usuarios del sistema (oficina y personal de calle)."""

    def _validar_datos(self, username, first_name, last_name, email):
        faltantes = [
            nombre for nombre, valor in (
                ('username', username), ('email', email), ('nombre', first_name), ('apellido', last_name)
            )
            if not valor
        ]
        if faltantes:
            raise ValueError(f'Faltan datos obligatorios del usuario: {", ".join(faltantes)}')

    def create_user(self, username, first_name, last_name, email, perfil=AccesoSistema.EMPLEADO,
                    empresa=None, password=None, **extra_fields):
        """
        Crea un usuario. Sin ``tipo_vendedor`` es un usuario de oficina;
        los permisos de empleado se pasan como flags ``puede_*``.
        """
        self._validar_datos(username, first_name, last_name, email)
        if perfil is None:
            raise ValueError('El usuario debe tener un perfil')

        user = self.model(
            username=username,
            first_name=first_name,
            last_name=last_name,
            email=self.normalize_email(email),
            perfil=perfil,
            empresa=empresa,
            **extra_fields
        )
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, first_name, last_name, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True or extra_fields.get('is_superuser') is not True:
            raise ValueError('Un superusuario debe tener is_staff=True e is_superuser=True')

        return self.create_user(
            username, first_name, last_name, email,
            perfil=AccesoSistema.ADMINISTRADOR, password=password, **extra_fields
        )
