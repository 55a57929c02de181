'''
Static enums mirroring the database ENUM types.
'''
import enum

# --- Base Enum Class ---
class ListableEnum(str, enum.Enum):
    """A custom Enum base class that can list all member names."""
    @classmethod
    def get_all_names(cls) -> list[str]:
        return [member.value for member in cls]


class SessionStatusEnum(ListableEnum):
    SCHEDULED = 'SCHEDULED'
    COMPLETED = 'COMPLETED'
    CANCELED = 'CANCELED'
    NO_SHOW = 'NO_SHOW'

class LedgerEntryTypeEnum(ListableEnum):
    SESSION_CHARGE = 'SESSION_CHARGE'
    PAYMENT_CONFIRMATION = 'PAYMENT_CONFIRMATION'
    ADJUSTMENT = 'ADJUSTMENT'

class ReminderStatusEnum(ListableEnum):
    PENDING = 'PENDING'
    IN_PROGRESS = 'IN_PROGRESS'
    SENT = 'SENT'
    FAILED = 'FAILED'

class ReminderChannelEnum(ListableEnum):
    WHATSAPP = 'WHATSAPP'

class WhatsAppNotificationStatusEnum(ListableEnum):
    NONE = 'NONE'
    PENDING = 'PENDING'
    SENT = 'SENT'
    FAILED = 'FAILED'

class WhatsAppReminderOptionEnum(ListableEnum):
    NONE = 'NONE'
    MINUTES_5 = '5'
    MINUTES_15 = '15'
    MINUTES_30 = '30'
    MINUTES_30_AND_5 = '30_5'

    @property
    def offsets_minutes(self) -> list[int]:
        """Minutes before the session start at which a reminder goes out."""
        if self is WhatsAppReminderOptionEnum.NONE:
            return []
        return [int(part) for part in self.value.split('_')]

class LanguageEnum(ListableEnum):
    EN = 'en'
    AR = 'ar'
    FR = 'fr'

class SupportRequestTypeEnum(ListableEnum):
    ISSUE = 'issue'
    FEATURE = 'feature'
