ROWS = 6
COLS = 5

CORRECT = "correct"
PRESENT = "present"
ABSENT = "absent"
MARKS = (CORRECT, PRESENT, ABSENT)

# Higher rank wins when the same letter was seen with different marks
_MARK_RANK = {ABSENT: 0, PRESENT: 1, CORRECT: 2}


# Check if a word is in the loaded dictionary.
def is_valid_word(word: str, dictionary) -> bool:
    return word.lower() in dictionary


# Evaluate a guess against the answer.
def evaluate_guess(guess: str, answer: str):
    guess = guess.lower()
    answer = answer.lower()
    if len(guess) != len(answer):
        raise ValueError(f"Guess '{guess}' and answer '{answer}' differ in length")

    result = [ABSENT] * len(answer)

# First pass: mark correct positions and count the unconsumed answer letters
    answer_counts = {}
    for i, (a, g) in enumerate(zip(answer, guess)):
        if g == a:
            result[i] = CORRECT
        else:
            answer_counts[a] = answer_counts.get(a, 0) + 1

# Second pass: mark letters that are present but in the wrong position
    for i, g in enumerate(guess):
        if result[i] == CORRECT:
            continue
        if answer_counts.get(g, 0) > 0:
            result[i] = PRESENT
            answer_counts[g] -= 1

    return result


def aggregate_letter_status(guesses, feedback, current_row: int):
    """
    Best known status of every letter guessed so far.

    Looks at submitted rows up to and including current_row. A letter seen
    as correct anywhere stays correct, present beats absent.

    Returns:
        dict mapping lowercase letter -> mark
    """
    best = {}
    for row in range(min(current_row, len(guesses) - 1) + 1):
        marks = feedback[row]
        if not marks:
            continue
        for letter, mark in zip(guesses[row], marks):
            if letter not in best or _MARK_RANK[mark] > _MARK_RANK[best[letter]]:
                best[letter] = mark
    return best
