# portal/routers/__init__.py

# Esto expone los modulos para que "from portal.routers import auth" funcione
from . import auth
from . import users
from . import branches
from . import pettycash
from . import recruitment
