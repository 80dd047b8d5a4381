"""Live message simulator - injects sample inbound messages on a fixed interval"""

import random
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from msg_classifier.conversations.models import Conversation, MessageRecord
from msg_classifier.inbox.service import InboxService
from msg_classifier.utils.logger_config import get_logger, preview

logger = get_logger(__name__)

SAMPLE_MESSAGES: List[Tuple[str, str]] = [
    ("+1 555 0100", "Your verification code is 482913. It expires in 10 minutes."),
    ("+1 555 0100", "Use 771204 to sign in. Never share this code with anyone."),
    ("Mom", "Are you coming for dinner on Sunday? Dad is making lasagna."),
    ("Mom", "Call me when you get a chance, nothing urgent."),
    ("+1 555 0142", "Hey! Still on for coffee tomorrow at 10?"),
    ("AMZN", "Your package with 2 items has been delivered. Track at amzn.to/track"),
    ("BANK-ALERT", "A debit of $42.10 was made on your card ending 1234 at GROCERY MART."),
    ("+44 7700 900123", "CONGRATULATIONS! You've won a $1000 gift card. Claim now at bit.ly/fr33-prize"),
    ("+1 555 0199", "URGENT: Your account has been suspended. Verify your details at secure-login.example"),
    ("StyleHub", "Flash sale! 40% off everything this weekend only. Reply STOP to opt out."),
    ("PizzaPlace", "Hungry? Get 2 large pizzas for $20 tonight with code FRIDAY."),
    ("Dr. Patel Clinic", "Reminder: your appointment is on Tue 14 Oct at 3:30 PM. Reply C to confirm."),
]

MessageCallback = Callable[[MessageRecord, Conversation], None]


class LiveMessageSimulator:
    """Generates simulated inbound messages through the inbox service"""

    def __init__(self,
                 service: InboxService,
                 interval_seconds: float = 20.0,
                 samples: Sequence[Tuple[str, str]] = SAMPLE_MESSAGES,
                 rng: Optional[random.Random] = None):
        """
        Initialize the simulator

        Args:
            service: Inbox service that receives the simulated messages
            interval_seconds: Seconds between simulated messages
            samples: (sender, text) pairs to pick from
            rng: Random source, seedable for tests
        """
        if not samples:
            raise ValueError("samples must not be empty")

        self.service = service
        self.interval_seconds = interval_seconds
        self.samples = list(samples)
        self.rng = rng or random.Random()

        # Runtime state
        self.is_running = False
        self.tick_count = 0
        self.last_error: Optional[str] = None
        self.last_tick_at: Optional[datetime] = None
        self.on_new_message: Optional[MessageCallback] = None
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick_once(self) -> Optional[Tuple[MessageRecord, Conversation]]:
        """
        Deliver one simulated message

        Returns:
            Tuple of (record, conversation), or None if delivery failed
        """
        sender, text = self.rng.choice(self.samples)
        self.last_tick_at = datetime.now()

        try:
            record, conversation = self.service.receive_message(text, sender)
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Error delivering simulated message from {sender}: {e}")
            return None

        self.tick_count += 1
        logger.info(f"Simulated message from {sender}: {preview(text)}")

        if self.on_new_message:
            try:
                self.on_new_message(record, conversation)
            except Exception as e:
                logger.error(f"Error in new message callback: {e}")

        return record, conversation

    def _run(self) -> None:
        logger.info(f"Starting live message simulator (interval: {self.interval_seconds}s)")
        try:
            while not self._stop_event.wait(self.interval_seconds):
                self.tick_once()
        finally:
            self.is_running = False
            logger.info("Live message simulator stopped")

    def start(self) -> None:
        """
        Start generating messages on a background thread
        """
        if self.is_running:
            logger.warning("Live message simulator is already running")
            return

        self._stop_event.clear()
        self.is_running = True
        self._thread = threading.Thread(target=self._run, name="live-simulator", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """
        Stop the background thread

        An in-flight classification is not cancelled; its message is still
        delivered before the thread exits.
        """
        if not self.is_running:
            logger.info("Live message simulator is not running")
            return

        logger.info("Stopping live message simulator...")
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def set_new_message_callback(self, callback: MessageCallback) -> None:
        """
        Set callback function to be called for each simulated message

        Args:
            callback: Function that takes (record, conversation) as parameters
        """
        self.on_new_message = callback
        logger.info("New message notification callback set")

    def get_status(self) -> Dict[str, Any]:
        """
        Get current status of the simulator

        Returns:
            Dictionary with simulator status
        """
        return {
            "is_running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "tick_count": self.tick_count,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
            "last_error": self.last_error,
        }
