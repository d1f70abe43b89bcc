"""Core marshaling logic for the login and user directory procedures.

The HTTP layer (directorio.api) only extracts request data and serializes
envelopes; everything between the request payload and the stored procedure
lives here.

Module Structure:
    - context.py        : Client context enrichment (IP, user agent, device)
    - db.py             : Lazily created SQLAlchemy engine
    - envelope.py       : ApiResponse / PagedResult
    - login_service.py  : sp_LoginUsuario call and row classification
    - usuario_service.py: sp_Usuario_CRUD actions
    - procedures.py     : EXEC building, result-set capture, shape classification
    - models.py         : Request and record DTOs
    - validators.py     : Payload field readers, clipping, photo decoding
    - identity.py       : Session-backed acting user (Flask-dependent)

Usage Pattern:
    These modules are NOT auto-imported. Import explicitly when needed:
        from directorio.core.login_service import authenticate
        from directorio.core.usuario_service import UsuarioService
"""
