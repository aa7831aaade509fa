import threading
import time
import unittest

from tempo_tray.locks import ReadWriteLock


class TestReadWriteLock(unittest.TestCase):
    def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(3, timeout=2)

        def reader():
            with lock.read():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(2)
        self.assertFalse(any(t.is_alive() for t in threads))

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        events = []
        lock.acquire_write()

        def reader():
            with lock.read():
                events.append("read")

        t = threading.Thread(target=reader)
        t.start()
        time.sleep(0.05)
        events.append("write-done")
        lock.release_write()
        t.join(2)
        self.assertEqual(events, ["write-done", "read"])


if __name__ == "__main__":
    unittest.main()
