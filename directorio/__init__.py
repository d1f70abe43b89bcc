"""Directorio de Usuarios Flask Application Package.

To use the Flask app:
    from directorio.flask_app import app

To call the stored procedures without Flask:
    from directorio.core.db import Database
    from directorio.core.usuario_service import UsuarioService
"""
# Note: We don't import flask_app by default so the core services can be
# used from scripts without building the application
