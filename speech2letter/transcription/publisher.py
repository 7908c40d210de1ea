"""Session publisher module for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.events import SessionNotice
from ..models.session import SessionSnapshot

logger = logging.getLogger(__name__)

STATE_TOPIC = "session.state"
NOTICE_TOPIC = "session.notice"


class SessionPublisher:
    """Publishes session snapshots and notices using pubsub.pub."""

    def __init__(self, state_topic: str = STATE_TOPIC, notice_topic: str = NOTICE_TOPIC):
        """Initialize session publisher.

        Args:
            state_topic: Pub/sub topic for session snapshots
            notice_topic: Pub/sub topic for user-visible notices
        """
        self.state_topic = state_topic
        self.notice_topic = notice_topic
        logger.info(f"SessionPublisher initialized with topics: {state_topic}, {notice_topic}")

    def publish_snapshot(self, snapshot: SessionSnapshot) -> None:
        """Publish the current session state.

        Args:
            snapshot: SessionSnapshot to publish
        """
        pub.sendMessage(self.state_topic, snapshot=snapshot)
        logger.debug(f"Published snapshot: {snapshot.status.value} ({snapshot.language.value})")

    def publish_notice(self, notice: SessionNotice) -> None:
        """Publish a notice the user should see.

        Args:
            notice: SessionNotice to publish
        """
        pub.sendMessage(self.notice_topic, notice=notice)
        logger.debug(f"Published notice: {notice.kind}")
