import itertools

import pytest

from uciarena.match_generator import MatchGenerator, Pairing


def _counter():
    numbers = itertools.count()
    return lambda: next(numbers)


def test_two_players_one_round_two_games():
    generator = MatchGenerator(_counter(), players=2, rounds=1, games=2)
    first = generator.next()
    second = generator.next()
    assert first == Pairing(round_id=1, pairing_id=0, game_id=1, opening_id=0, player1=0, player2=1)
    assert second == Pairing(round_id=1, pairing_id=0, game_id=2, opening_id=0, player1=0, player2=1)
    assert generator.next() is None


def test_each_pair_of_players_appears_once_per_round():
    generator = MatchGenerator(_counter(), players=4, rounds=1, games=1)
    pairs = [(p.player1, p.player2) for p in generator]
    assert pairs == list(itertools.combinations(range(4), 2))


@pytest.mark.parametrize("players,rounds,games", [(2, 1, 1), (3, 2, 2), (5, 3, 2)])
def test_total_number_of_games(players, rounds, games):
    pairings = list(MatchGenerator(_counter(), players, rounds, games))
    assert len(pairings) == players * (players - 1) // 2 * rounds * games
    assert [p.game_id for p in pairings] == list(range(1, len(pairings) + 1))


def test_games_of_a_pair_share_opening_and_pairing_id():
    pairings = list(MatchGenerator(_counter(), players=3, rounds=2, games=2))
    for first, second in zip(pairings[::2], pairings[1::2]):
        assert first.pairing_id == second.pairing_id
        assert first.opening_id == second.opening_id
        assert (first.player1, first.player2) == (second.player1, second.player2)
    assert len({p.opening_id for p in pairings}) == len(pairings) // 2


def test_rounds_advance():
    pairings = list(MatchGenerator(_counter(), players=3, rounds=2, games=1))
    assert [p.round_id for p in pairings] == [1, 1, 1, 2, 2, 2]


def test_resuming_continues_numbering():
    generator = MatchGenerator(_counter(), players=2, rounds=3, games=2, played_games=2)
    pairings = list(generator)
    assert [p.game_id for p in pairings] == [3, 4, 5, 6]
    assert [p.round_id for p in pairings] == [2, 2, 3, 3]
    assert pairings[0].pairing_id == 1


def test_missing_opening_is_passed_through():
    pairing = MatchGenerator(lambda: None, players=2, rounds=1, games=1).next()
    assert pairing.opening_id is None


@pytest.mark.parametrize("players,rounds,games", [(1, 1, 1), (2, 0, 1), (2, 1, 0)])
def test_invalid_arguments(players, rounds, games):
    with pytest.raises(ValueError):
        MatchGenerator(_counter(), players, rounds, games)