import os
import socket
import logging

logger = logging.getLogger("pyterminfo")

PORT = 12013


class UDPHandler(logging.Handler):
    """Send log records to a local UDP port, see ``listen_to_logs()``."""

    def __init__(self, port=PORT):
        super().__init__()
        self.udp_address = ("127.0.0.1", port)
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)

    def emit(self, record):
        msg = self.format(record)
        bb = msg.encode()
        size = 2**10
        while bb:
            bb1 = bb[:size]
            bb = bb[size:]
            self._socket.sendto(bb1, self.udp_address)

    def close(self):
        self._socket.close()
        super().close()


def configure_logging(environ=None):
    """Configure the pyterminfo logger from the environment.

    * PYTERMINFO_LOG_LEVEL: the log level name, default INFO.
    * PYTERMINFO_LOG_UDP: if set, also send logs over UDP, so they can be
      seen with ``pyterminfo --listen``. The value is the port number, or
      "1" for the default port.
    """
    environ = os.environ if environ is None else environ

    level = environ.get("PYTERMINFO_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))

    udp = environ.get("PYTERMINFO_LOG_UDP", "")
    if udp and not any(isinstance(h, UDPHandler) for h in logger.handlers):
        port = int(udp) if udp.isdigit() and udp != "1" else PORT
        logger.addHandler(UDPHandler(port))


configure_logging()


def listen_to_logs(port=PORT):
    """Called from ``pyterminfo --listen``.

    This way we can see the logs from another process, so they do not get
    mixed up with the escape codes being written to the terminal.
    """

    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", port))

    while True:
        data, addr = sock.recvfrom(2**20)
        print(data.decode())
