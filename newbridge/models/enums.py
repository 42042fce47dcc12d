import enum


class AdminRole(str, enum.Enum):
    SUPER_ADMIN = "super_admin"
    CITY_ADMIN = "city_admin"
    LOCAL_ADMIN = "local_admin"


class AdminScopeType(str, enum.Enum):
    GLOBAL = "global"
    CITY = "city"
    LOCATION = "location"


class ResourceCategory(str, enum.Enum):
    FOOD = "food"
    SHELTER = "shelter"
    HOUSING = "housing"
    LEGAL = "legal"


class ChangeType(str, enum.Enum):
    ADD = "add"
    UPDATE = "update"


class UpdateStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"


class AvailabilityStatus(str, enum.Enum):
    YES = "yes"
    NO = "no"
    NOT_SURE = "not_sure"
