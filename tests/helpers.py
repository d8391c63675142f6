from errors import StorageUnavailable

WORDS = ["crane", "slate", "sassy", "sadly", "adieu", "pious", "tiger", "eerie", "spoon"]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FixedChoice:
    """Stands in for random.Random when a test needs a known secret."""

    def __init__(self, word):
        self.word = word

    def choice(self, seq):
        assert self.word in seq
        return self.word


class FlakyBackend:
    """Key/value backend whose every call fails."""

    def get(self, key):
        raise StorageUnavailable("disk gone")

    def set(self, key, value):
        raise StorageUnavailable("disk gone")

    def delete(self, key):
        raise StorageUnavailable("disk gone")


def type_word(session, word):
    for ch in word:
        session.input_letter(ch)


def play(session, word):
    type_word(session, word)
    return session.submit_guess()
