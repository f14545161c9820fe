"""
WebSocket Room Relay Client Example
Joins a room, sends chat lines and prints everything the relay sends back
"""

import asyncio
import json
import websockets
from typing import Any, Dict, Optional
import argparse
import sys


def format_event(data: Dict[str, Any]) -> str:
    """Render one server event as a terminal line"""
    msg_type = data.get("type")

    if msg_type == "chat":
        return f"📨 [{data.get('timestamp', '')}] {data.get('username', 'unknown')}: {data.get('text', '')}"
    elif msg_type == "room-info":
        return f"🏠 Room {data.get('roomId')} ({data.get('memberCount', 0)} members)"
    elif msg_type in ("user-joined", "user-left"):
        return f"👥 {data.get('message', '')}"
    else:
        return f"❓ Unknown message type: {msg_type}"


class ChatClient:
    """Relay client for manual testing"""

    def __init__(self, username: str, room_id: str = "", server_url: str = "ws://localhost:3001/ws"):
        self.username = username
        self.room_id = room_id
        self.server_url = server_url
        self.websocket: Optional[websockets.ClientConnection] = None
        self.running = False

    async def connect(self) -> bool:
        """Connect to the relay"""
        try:
            self.websocket = await websockets.connect(self.server_url)
            print(f"✅ Connected to {self.server_url}")
            return True
        except Exception as e:
            print(f"❌ Connection failed: {e}")
            return False

    async def join_room(self) -> bool:
        """Join a room; an empty room id asks the server for a new one"""
        if not self.websocket:
            return False

        await self.websocket.send(json.dumps({
            "type": "join",
            "roomId": self.room_id,
            "username": self.username,
        }))

        data = json.loads(await self.websocket.recv())
        if data.get("type") != "room-info":
            print(f"❌ Unexpected response: {data}")
            return False

        self.room_id = data["roomId"]
        print(format_event(data))
        return True

    async def send_message(self, text: str) -> bool:
        """Send a chat line to the room"""
        if not self.websocket:
            return False

        try:
            await self.websocket.send(json.dumps({"type": "chat", "text": text}))
            return True
        except websockets.exceptions.ConnectionClosed as e:
            print(f"❌ Send failed: {e}")
            return False

    async def listen_for_messages(self):
        """Print incoming events until the connection closes"""
        if not self.websocket:
            return

        try:
            async for message in self.websocket:
                print(format_event(json.loads(message)))
        except websockets.exceptions.ConnectionClosed:
            print("🔌 Connection closed by server")

    async def disconnect(self):
        """Disconnect from the relay"""
        self.running = False
        if self.websocket:
            await self.websocket.close()
            print("🔌 Disconnected from server")

    async def run_interactive(self):
        """Run interactive chat session"""
        if not await self.connect():
            return

        if not await self.join_room():
            await self.disconnect()
            return

        self.running = True
        listen_task = asyncio.create_task(self.listen_for_messages())

        try:
            print(f"\n🎮 In room {self.room_id}. Type a message, or /quit")
            print("-" * 50)

            while self.running:
                try:
                    user_input = (await asyncio.to_thread(input)).strip()
                except (KeyboardInterrupt, EOFError):
                    break

                if not user_input:
                    continue
                if user_input == "/quit":
                    break
                await self.send_message(user_input)

        finally:
            listen_task.cancel()
            await self.disconnect()


async def scenario_two_members(server_url: str):
    """Scenario: generated room, second member joins, chat, first member leaves"""
    print("\n🧪 Scenario: two members in a generated room")
    print("=" * 60)

    alice = ChatClient("alice", "", server_url)
    if not (await alice.connect() and await alice.join_room()):
        return
    alice_task = asyncio.create_task(alice.listen_for_messages())

    bob = ChatClient("bob", alice.room_id, server_url)
    if not (await bob.connect() and await bob.join_room()):
        alice_task.cancel()
        await alice.disconnect()
        return
    bob_task = asyncio.create_task(bob.listen_for_messages())

    await asyncio.sleep(0.5)
    await bob.send_message("hi")
    await asyncio.sleep(0.5)

    alice_task.cancel()
    await alice.disconnect()
    await asyncio.sleep(0.5)

    bob_task.cancel()
    await bob.disconnect()
    print("✅ Scenario completed")


async def main():
    """Main function with command line interface"""
    parser = argparse.ArgumentParser(description="WebSocket Room Relay Client")
    parser.add_argument("--username", default="testuser", help="Display name")
    parser.add_argument("--room", default="", help="Room id (empty creates a new room)")
    parser.add_argument("--server", default="ws://localhost:3001/ws", help="Server URL")
    parser.add_argument("--scenario", action="store_true", help="Run the two-member scenario")

    args = parser.parse_args()

    if args.scenario:
        await scenario_two_members(args.server)
    else:
        client = ChatClient(args.username, args.room, args.server)
        await client.run_interactive()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Client error: {e}")
        sys.exit(1)
