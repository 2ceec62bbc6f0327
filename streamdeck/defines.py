"""Constants shared between the plugin and its Property Inspector."""

from enum import Enum

# Per-action setting keys
SETTING_PERSPECTIVE = "perspective"
SETTING_CUSTOM_PERSPECTIVE = "customPerspective"
SETTING_REFRESH_INTERVAL = "refreshInterval"
SETTING_BADGE_COUNT = "badgeCount"

# Values accepted for SETTING_BADGE_COUNT
SETTING_BADGE_COUNT_FROM_OVERDUE = "overdueCount"
SETTING_BADGE_COUNT_FROM_TODAY = "todayCount"
SETTING_BADGE_COUNT_FROM_FLAGGED = "flaggedCount"

# Property Inspector payload keys
PAYLOAD_EVENT_TYPE = "eventType"
PAYLOAD_PERSPECTIVES = "perspectives"

EVENT_TYPE_GET_PERSPECTIVES = "getPerspectives"


class BadgeCountSource(str, Enum):
    """Which OmniFocus count drives a button's badge."""

    OVERDUE = SETTING_BADGE_COUNT_FROM_OVERDUE
    TODAY = SETTING_BADGE_COUNT_FROM_TODAY
    FLAGGED = SETTING_BADGE_COUNT_FROM_FLAGGED

    @property
    def script_name(self) -> str:
        return _SCRIPT_NAMES[self]


_SCRIPT_NAMES = {
    BadgeCountSource.OVERDUE: "overdue_count",
    BadgeCountSource.TODAY: "today_count",
    BadgeCountSource.FLAGGED: "flagged_count",
}

# Stream Deck SDK events (inbound)
EVENT_WILL_APPEAR = "willAppear"
EVENT_WILL_DISAPPEAR = "willDisappear"
EVENT_DID_RECEIVE_SETTINGS = "didReceiveSettings"
EVENT_KEY_DOWN = "keyDown"
EVENT_SEND_TO_PLUGIN = "sendToPlugin"
EVENT_PROPERTY_INSPECTOR_DID_APPEAR = "propertyInspectorDidAppear"
EVENT_SYSTEM_DID_WAKE_UP = "systemDidWakeUp"

# Stream Deck SDK events (outbound)
EVENT_SET_STATE = "setState"
EVENT_SET_TITLE = "setTitle"
EVENT_SHOW_ALERT = "showAlert"
EVENT_OPEN_URL = "openUrl"
EVENT_SEND_TO_PROPERTY_INSPECTOR = "sendToPropertyInspector"
