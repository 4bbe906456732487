"""
OSC channel to one player process

A PlayerChannel is a throwaway handle bound to a single player's port. The
supervisor builds a fresh one from the active slot for every operation, so
it always points at whichever player is bound right now.

Rules this class handles for you:
1. Commands with no args are sent with an empty list []
2. The shutdown offset is always sent as an int
3. Clients are opened per send and closed afterwards
"""

from pythonosc import tcp_client, udp_client

TRANSPORT_TCP = 'tcp'
TRANSPORT_UDP = 'udp'
TRANSPORTS = (TRANSPORT_TCP, TRANSPORT_UDP)

PING_ADDRESS = '/ping'
SHUTDOWN_ADDRESS = '/system/shutdown'


class PlayerChannel:
    """Send OSC messages to a player listening on host:port"""

    def __init__(self, port: int, host: str = "127.0.0.1", transport: str = TRANSPORT_TCP):
        if transport not in TRANSPORTS:
            raise ValueError(f"unknown transport: {transport}")
        self.host = host
        self.port = port
        self.transport = transport

    def send_message(self, address: str, *args):
        """Send an application message, e.g. send_message('/player/play', 0)"""
        if self.transport == TRANSPORT_UDP:
            client = udp_client.SimpleUDPClient(self.host, self.port)
        else:
            client = tcp_client.SimpleTCPClient(self.host, self.port)

        try:
            client.send_message(address, list(args))
        finally:
            client.close()

    def send_ping(self):
        self.send_message(PING_ADDRESS)

    def send_shutdown(self, offset: int = 0):
        """Ask the player to exit `offset` milliseconds from now"""
        self.send_message(SHUTDOWN_ADDRESS, int(offset))

    def __repr__(self):
        return f"PlayerChannel({self.transport}://{self.host}:{self.port})"
