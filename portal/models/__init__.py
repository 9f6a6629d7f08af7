# portal/models/__init__.py

# 1. Base de datos (Origen de la clase declarativa)
from portal.database import Base

# 2. Organizacion (Sucursales)
from .organization import Branch

# 3. Usuarios y Roles
from .users import User, Role

# 4. Caja chica
from .pettycash import (
    PettyCashCategory,
    FloatConfig,
    LedgerEntry,
    PettyCashTransaction,
    ReplenishmentRequest,
    CashCount,
    EntryType,
    ReferenceType,
    ApprovalStatus,
)

# 5. Reclutamiento
from .recruitment import (
    JobPosting,
    Application,
    RecruitmentRuleSet,
    EmploymentType,
    ApplicantType,
    ApplicationStatus,
)
