import logging
import time

from framelink import FrameLink, MemoryTransport, NoChannel, NoInitializedChannel

HOST_ORIGIN = "http://192.168.156.168:8080"
FRAME_ORIGIN = "http://192.168.156.168:8081"

def post_when_ready(service, data, attempts: int = 50):
    # What the demo pages' button click does, retried until the handshake is through
    for _ in range(attempts):
        try:
            return service.post_message(data)
        except (NoChannel, NoInitializedChannel):
            time.sleep(0.1)
    raise TimeoutError(f"{service.identity}: no channel after {attempts} attempts")

def main():
    logging.basicConfig(level=logging.DEBUG, format="%(threadName)s %(name)s: %(message)s")

    # The embedded page: no frame reference, it waits for the host's handshake
    frame_window = MemoryTransport(FRAME_ORIGIN)
    frame = FrameLink(HOST_ORIGIN, transport=frame_window, identity="frame")
    frame.add_handler(lambda data: print("frame got:", data))

    # The host page holds the frame and bootstraps the channel
    host = FrameLink(FRAME_ORIGIN, transport="memory", origin=HOST_ORIGIN,
                     frame=frame_window, identity="host")
    host.add_handler(lambda data: print("host got:", data))

    post_when_ready(host, "testtdsksdhdsk")
    post_when_ready(frame, "qqqq")

    time.sleep(0.5)
    host.close()
    frame.close()

if __name__ == "__main__":
    main()
