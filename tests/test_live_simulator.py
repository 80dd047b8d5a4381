"""Test suite for LiveMessageSimulator"""

import random
import threading
import unittest
from unittest.mock import Mock

from msg_classifier.classification.types import ClassificationResult, MessageType
from msg_classifier.conversations.store import ConversationStore
from msg_classifier.inbox.service import InboxService
from msg_classifier.simulator.live_simulator import SAMPLE_MESSAGES, LiveMessageSimulator


class TestLiveMessageSimulator(unittest.TestCase):
    """Test cases for LiveMessageSimulator"""

    def setUp(self):
        """Set up test environment"""
        self.classifier = Mock()
        self.classifier.classify.return_value = ClassificationResult(
            MessageType.PERSONAL, 0.8, "reason", "summary"
        )
        self.service = InboxService(ConversationStore(), self.classifier)
        self.simulator = LiveMessageSimulator(
            self.service, interval_seconds=1, rng=random.Random(7)
        )

    def tearDown(self):
        """Clean up test environment"""
        self.simulator.stop(timeout=2)

    def test_initialization(self):
        """Test simulator initialization"""
        self.assertEqual(self.simulator.interval_seconds, 1)
        self.assertFalse(self.simulator.is_running)
        self.assertEqual(self.simulator.tick_count, 0)
        self.assertIsNone(self.simulator.last_error)

    def test_empty_samples_rejected(self):
        with self.assertRaises(ValueError):
            LiveMessageSimulator(self.service, samples=[])

    def test_tick_once_delivers_sample(self):
        """One tick puts one sample message into the inbox"""
        record, conversation = self.simulator.tick_once()

        self.assertIn((record.sender, record.text), SAMPLE_MESSAGES)
        self.assertFalse(record.is_outgoing)
        self.assertEqual(conversation.last_message, record)
        self.assertEqual(self.simulator.tick_count, 1)
        self.assertEqual(len(self.service.list_conversations()), 1)

    def test_ticks_group_by_sender(self):
        simulator = LiveMessageSimulator(
            self.service, samples=[("+1 555 0100", "code 1"), ("+1 555 0100", "code 2")]
        )
        for _ in range(5):
            simulator.tick_once()

        conversations = self.service.list_conversations()
        self.assertEqual(len(conversations), 1)
        self.assertEqual(len(conversations[0].messages), 5)
        self.assertEqual(conversations[0].unread_count, 5)

    def test_callback_invoked(self):
        """Test new message callback"""
        callback = Mock()
        self.simulator.set_new_message_callback(callback)

        record, conversation = self.simulator.tick_once()

        callback.assert_called_once_with(record, conversation)

    def test_callback_error_does_not_fail_tick(self):
        self.simulator.set_new_message_callback(Mock(side_effect=RuntimeError("boom")))

        self.assertIsNotNone(self.simulator.tick_once())
        self.assertEqual(self.simulator.tick_count, 1)

    def test_delivery_error_recorded(self):
        """Errors while delivering are recorded, not raised"""
        self.classifier.classify.side_effect = RuntimeError("classifier down")

        self.assertIsNone(self.simulator.tick_once())
        self.assertEqual(self.simulator.tick_count, 0)
        self.assertIn("classifier down", self.simulator.last_error)
        self.assertIsNotNone(self.simulator.get_status()["last_tick_at"])

    def test_start_and_stop(self):
        """Background thread delivers messages until stopped"""
        delivered = threading.Event()
        self.simulator.set_new_message_callback(lambda record, conversation: delivered.set())

        self.simulator.start()
        self.assertTrue(self.simulator.is_running)
        self.assertTrue(delivered.wait(5))

        self.simulator.stop(timeout=5)

        self.assertFalse(self.simulator.is_running)
        self.assertGreaterEqual(self.simulator.tick_count, 1)

    def test_start_twice_is_harmless(self):
        self.simulator.start()
        first_thread = self.simulator._thread
        self.simulator.start()
        self.assertIs(self.simulator._thread, first_thread)

    def test_stop_when_not_running(self):
        self.simulator.stop()
        self.assertFalse(self.simulator.is_running)

    def test_get_status(self):
        """Test status reporting"""
        self.simulator.tick_once()
        status = self.simulator.get_status()

        self.assertEqual(
            set(status), {"is_running", "interval_seconds", "tick_count", "last_tick_at", "last_error"}
        )
        self.assertFalse(status["is_running"])
        self.assertEqual(status["interval_seconds"], 1)
        self.assertEqual(status["tick_count"], 1)


if __name__ == "__main__":
    unittest.main()
