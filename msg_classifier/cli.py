"""
MsgClassifier terminal inbox.

Wires configuration, storage, contacts, the classification client and the
live simulator together, then runs an interactive command loop:

    send <sender> | <text>      classify an inbound message
    reply <n> <text>            send a message in conversation n
    list                        show conversations
    open <n>                    show messages of conversation n and mark it read
    read <n>                    mark conversation n as read
    reclassify <n> <m>          classify message m of conversation n again
    search <query> [category]   filter conversations
    contacts                    list contacts
    contact add <phone> <name>  save a contact
    contact rm <phone>          remove a contact
    profile [<name> | <phone>]  show or update your profile
    status                      inbox and simulator statistics
    clear                       delete all conversations
    help / quit

Usage:
    msg-classifier [--storage sqlite|json] [--no-simulator] [--interval SECONDS]
"""

import argparse
import shlex
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from msg_classifier.classification.llm_client import ClassificationClient
from msg_classifier.classification.types import MessageType
from msg_classifier.config import InboxConfig, load_config
from msg_classifier.conversations.models import Conversation, MessageRecord
from msg_classifier.conversations.reconciler import ALL_CATEGORIES
from msg_classifier.conversations.store import ConversationStore
from msg_classifier.database.inbox_db import InboxDatabase
from msg_classifier.database.repository import (
    ConversationRepository,
    JsonFileConversationRepository,
    SQLiteConversationRepository,
)
from msg_classifier.exceptions import ConfigurationError, MessageValidationError
from msg_classifier.inbox.service import InboxService
from msg_classifier.simulator.live_simulator import LiveMessageSimulator
from msg_classifier.user.contact_directory import ContactDirectory
from msg_classifier.utils.logger_config import get_logger, setup_logging

logger = get_logger(__name__)

CATEGORY_ICONS = {
    MessageType.SPAM: "🚫",
    MessageType.PERSONAL: "👤",
    MessageType.TRANSACTIONAL: "💳",
    MessageType.MARKETING: "📣",
    MessageType.OTP: "🔑",
    MessageType.UNKNOWN: "❔",
}


@dataclass
class InboxApp:
    """Everything the command loop needs"""
    config: InboxConfig
    service: InboxService
    contacts: ContactDirectory
    simulator: Optional[LiveMessageSimulator] = None


def build_repository(config: InboxConfig, database: InboxDatabase) -> ConversationRepository:
    if config.storage_backend == "json":
        return JsonFileConversationRepository(config.json_store_path)
    return SQLiteConversationRepository(database)


def create_app(config: InboxConfig, classifier=None) -> InboxApp:
    """
    Build the inbox from configuration

    Args:
        config: Application configuration
        classifier: Override for the classification client

    Raises:
        ConfigurationError: If no classifier is given and no API key is configured
    """
    database = InboxDatabase(config.database_path)
    contacts = ContactDirectory(database)
    store = ConversationStore(build_repository(config, database), contacts.resolve)
    classifier = classifier or ClassificationClient.from_config(config)
    service = InboxService(store, classifier, contacts)

    simulator = None
    if config.simulator_enabled:
        simulator = LiveMessageSimulator(service, config.simulator_interval_seconds)

    return InboxApp(config=config, service=service, contacts=contacts, simulator=simulator)


def format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%I:%M %p")


def format_record(record: MessageRecord, index: Optional[int] = None) -> str:
    icon = CATEGORY_ICONS.get(record.result.category, "❔")
    direction = "📤" if record.is_outgoing else "📥"
    prefix = f"{index}. " if index is not None else ""
    return (
        f"  {prefix}{direction} [{format_time(record.timestamp)}] {record.text}\n"
        f"       {icon} {record.result.category.value} "
        f"({record.result.confidence * 100:.0f}%) - {record.result.reason}"
    )


def format_conversation(conversation: Conversation, index: int) -> str:
    last = conversation.last_message
    icon = CATEGORY_ICONS.get(last.result.category, "❔")
    unread = f" 🔵 {conversation.unread_count}" if conversation.unread_count else ""
    text = last.text if len(last.text) <= 60 else last.text[:57] + "..."
    return (
        f"{index:>3}. {icon} {conversation.contact_name} <{conversation.phone_number}>{unread}\n"
        f"       {format_time(last.timestamp)} · {text}"
    )


def print_conversations(conversations: List[Conversation]) -> None:
    if not conversations:
        print("📭 No conversations yet.")
        return
    for index, conversation in enumerate(conversations, 1):
        print(format_conversation(conversation, index))


class InboxShell:
    """Interactive command loop over an InboxApp"""

    def __init__(self, app: InboxApp, input_func=input):
        self.app = app
        self.input = input_func
        self.visible: List[Conversation] = []

    def _conversation_at(self, position: str) -> Conversation:
        if not self.visible:
            self.visible = self.app.service.list_conversations()
        try:
            index = int(position) - 1
        except ValueError:
            raise MessageValidationError(f"Not a conversation number: {position}")
        if not 0 <= index < len(self.visible):
            raise MessageValidationError(f"No conversation #{position}, run 'list' first")
        return self.visible[index]

    def do_send(self, args: str) -> None:
        if "|" not in args:
            raise MessageValidationError("Usage: send <sender> | <text>")
        sender, text = (part.strip() for part in args.split("|", 1))
        print("⏳ Classifying...")
        record, conversation = self.app.service.receive_message(text, sender)
        print(f"✅ Filed under {conversation.contact_name}")
        print(format_record(record))

    def do_reply(self, args: str) -> None:
        position, _, text = args.partition(" ")
        conversation = self._conversation_at(position)
        print("⏳ Classifying...")
        record, _ = self.app.service.send_message(conversation.id, text)
        print(format_record(record))

    def do_list(self, args: str = "") -> None:
        self.visible = self.app.service.list_conversations()
        print_conversations(self.visible)

    def do_open(self, args: str) -> None:
        conversation = self._conversation_at(args.strip())
        print(f"\n💬 {conversation.contact_name} <{conversation.phone_number}>")
        print("=" * 60)
        # Oldest first reads like a chat
        total = len(conversation.messages)
        for offset, record in enumerate(reversed(conversation.messages)):
            print(format_record(record, total - offset))
        print("=" * 60)
        self.app.service.mark_read(conversation.id)

    def do_read(self, args: str) -> None:
        conversation = self._conversation_at(args.strip())
        self.app.service.mark_read(conversation.id)
        print(f"✅ Marked {conversation.contact_name} as read")

    def do_reclassify(self, args: str) -> None:
        parts = args.split()
        if len(parts) != 2:
            raise MessageValidationError("Usage: reclassify <conversation #> <message #>")
        conversation = self._conversation_at(parts[0])
        try:
            # Message numbers match 'open', where 1 is the newest message
            record = conversation.messages[int(parts[1]) - 1]
        except (ValueError, IndexError):
            raise MessageValidationError(f"No message #{parts[1]} in this conversation")
        print("⏳ Classifying...")
        result = self.app.service.reclassify_message(conversation.id, record.id)
        if result is None:
            print("⚠️  Message no longer exists")
        else:
            print(f"{CATEGORY_ICONS[result.category]} {result.category.value} - {result.reason}")

    def do_search(self, args: str) -> None:
        try:
            parts = shlex.split(args)
        except ValueError:
            # Unbalanced quotes, e.g. "don't"; search for the text as typed
            parts = [args.strip()] if args.strip() else []
        query = parts[0] if parts else ""
        category = parts[1] if len(parts) > 1 else ALL_CATEGORIES
        self.visible = self.app.service.search(query, category)
        print_conversations(self.visible)

    def do_contacts(self, args: str = "") -> None:
        contacts = self.app.contacts.list_contacts()
        if not contacts:
            print("📇 No contacts saved.")
        for contact in contacts:
            print(f"  📇 {contact}")

    def do_contact(self, args: str) -> None:
        action, _, rest = args.partition(" ")
        if action == "add":
            phone, _, name = rest.strip().partition(" ")
            try:
                contact = self.app.contacts.add_contact(phone, name)
            except ValueError as e:
                raise MessageValidationError(str(e))
            print(f"✅ Saved {contact}")
        elif action == "rm":
            if self.app.contacts.remove_contact(rest.strip()):
                print("✅ Contact removed")
            else:
                print("⚠️  No such contact")
        else:
            raise MessageValidationError("Usage: contact add <phone> <name> | contact rm <phone>")

    def do_profile(self, args: str) -> None:
        if args.strip():
            name, _, phone = args.partition("|")
            try:
                self.app.contacts.update_profile(name, phone)
            except ValueError as e:
                raise MessageValidationError(str(e))
        profile = self.app.contacts.get_profile()
        print(f"🙋 {profile.name} <{profile.phone}>")

    def do_status(self, args: str = "") -> None:
        status = self.app.service.get_status()
        print(f"📊 {status['conversations']} conversations, {status['messages']} messages, "
              f"{status['unread']} unread")
        for category, count in status["categories"].items():
            print(f"   {CATEGORY_ICONS[MessageType(category)]} {category}: {count}")
        metrics = status["classification"]
        print(f"   ⏱  {metrics['total_classifications']} classifications, "
              f"avg {metrics['average_duration_seconds']:.2f}s, "
              f"{metrics['unknown_results']} unknown")
        if self.app.simulator:
            sim = self.app.simulator.get_status()
            state = "running" if sim["is_running"] else "stopped"
            print(f"   🤖 Simulator {state}, {sim['tick_count']} messages delivered")

    def do_clear(self, args: str = "") -> None:
        answer = self.input("Clear all history? [y/N] ").strip().lower()
        if answer in ("y", "yes"):
            self.app.service.clear_all()
            self.visible = []
            print("🗑  History cleared")

    def do_help(self, args: str = "") -> None:
        print(__doc__.split("Usage:")[0])

    def handle(self, line: str) -> bool:
        """
        Run one command line

        Returns:
            False when the shell should exit
        """
        command, _, args = line.strip().partition(" ")
        if not command:
            return True
        if command in ("quit", "exit"):
            return False

        handler = getattr(self, f"do_{command.lower()}", None)
        if handler is None:
            print(f"❓ Unknown command: {command} (try 'help')")
            return True

        try:
            handler(args)
        except MessageValidationError as e:
            print(f"⚠️  {e}")
        return True

    def run(self) -> None:
        print("📱 MsgClassifier - AI Message Analysis")
        print("=" * 60)
        print("Type 'help' for commands.\n")
        self.do_list()
        while True:
            try:
                line = self.input("\n> ")
            except (EOFError, KeyboardInterrupt):
                print()
                break
            if not self.handle(line):
                break


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify and organize text messages with Claude")
    parser.add_argument("--storage", choices=["sqlite", "json"], help="Conversation storage backend")
    parser.add_argument("--no-simulator", action="store_true", help="Disable simulated inbound messages")
    parser.add_argument("--interval", type=float, help="Seconds between simulated messages")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> InboxConfig:
    """
    Environment configuration with command line overrides applied

    Raises:
        ValidationError: If an override is out of range
        ValueError: If an INBOX_* variable is not a valid number
    """
    config = load_config()
    overrides = {}
    if args.storage:
        overrides["storage_backend"] = args.storage
    if args.no_simulator:
        overrides["simulator_enabled"] = False
    if args.interval is not None:
        overrides["simulator_interval_seconds"] = args.interval
    if args.log_level:
        overrides["log_level"] = args.log_level
    if overrides:
        config = InboxConfig(**{**config.model_dump(), **overrides})
    return config


def main(argv=None) -> int:
    """Main function with the interactive inbox and live simulator"""
    load_dotenv()
    args = parse_args(argv)

    try:
        config = build_config(args)
    except ValidationError as e:
        print(f"❌ Invalid configuration:\n{e}")
        return 1
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level, config.log_dir, console_output=False)

    try:
        app = create_app(config)
    except ConfigurationError as e:
        print(f"❌ {e}")
        return 1

    shell = InboxShell(app)

    if app.simulator:
        def on_simulated(record: MessageRecord, conversation: Conversation) -> None:
            icon = CATEGORY_ICONS.get(record.result.category, "❔")
            print(f"\n🔔 {conversation.contact_name}: {record.text[:60]} {icon}")

        app.simulator.set_new_message_callback(on_simulated)
        app.simulator.start()
        print(f"🤖 Live simulator on, a new message every {config.simulator_interval_seconds:.0f}s")

    try:
        shell.run()
    finally:
        if app.simulator:
            app.simulator.stop()
        print("👋 Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
