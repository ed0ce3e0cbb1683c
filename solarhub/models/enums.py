import enum


class ProjectStatus(str, enum.Enum):
    LEAD = "lead"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    APPROVED = "approved"
    INSTALLATION = "installation"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InverterModel(str, enum.Enum):
    GROWATT = "Growatt"
    FRONIUS = "Fronius"
    GOODWE = "GoodWe"
    SOLIS = "Solis"
    HUAWEI = "Huawei"


class SystemStatus(str, enum.Enum):
    NORMAL = "normal"
    ALERT = "alert"
    CRITICAL = "critical"


class AlertType(str, enum.Enum):
    LOW_GENERATION = "low_generation"
    HIGH_CONSUMPTION = "high_consumption"
    SYSTEM_FAILURE = "system_failure"
    MAINTENANCE = "maintenance"


class AlertSeverity(str, enum.Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class AlertFilter(str, enum.Enum):
    ACTIVE = "active"
    ALL = "all"
    RESOLVED = "resolved"
