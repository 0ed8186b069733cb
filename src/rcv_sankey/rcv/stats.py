
import pandas as pd


class IRV_stats:
    """
    Summary statistics mixin for InstantRunoff.
    """

    ####################
    # OUTCOME STATS

    def _winner(self):
        '''
        Display name of the winner.
        '''
        return self.winner().name

    def _number_of_rounds(self):
        return self.n_rounds()

    def _n_candidates(self):
        return len(self.get_candidates())

    def _n_ballots(self):
        return len(self.get_ballots())

    def _undervote(self):
        '''
        Ballots with no rankings at all. These never count towards any candidate.
        '''
        return sum(1 for b in self.get_ballots() if b.is_blank())

    def _first_round_active_votes(self):
        return sum(self.get_round_tally_dict(1).values())

    def _final_round_active_votes(self):
        return sum(self.get_round_tally_dict(self.n_rounds()).values())

    def _first_round_winner_vote(self):
        return self.get_round_tally_dict(1)[self.winner().id]

    def _final_round_winner_vote(self):
        return self.get_round_tally_dict(self.n_rounds())[self.winner().id]

    def _first_round_winner_percent(self):
        '''
        Winner's share of first round active votes, in percent.
        '''
        active = self._first_round_active_votes()
        if not active:
            return 0.0
        return round(100 * self._first_round_winner_vote() / active, 3)

    def _final_round_winner_percent(self):
        active = self._final_round_active_votes()
        if not active:
            return 0.0
        return round(100 * self._final_round_winner_vote() / active, 3)

    def _first_round_winner_place(self):
        '''
        Place of the winner in the first round, ordered by descending votes then candidate id.
        '''
        round_candidates, _ = self.get_round_tally_tuple(1, desc_sort=True)
        return round_candidates.index(self.winner().id) + 1

    def _come_from_behind(self):
        '''
        True if the winner was not the first round leader.
        '''
        return self._first_round_winner_place() != 1

    def _total_exhausted(self):
        '''
        Ballots that counted for a candidate at some point but are inactive in the final round.
        Blank ballots are reported as undervotes instead.
        '''
        return self.get_round_exhausted(self.n_rounds()) - self._undervote()

    def _tiebreak_eliminations(self):
        '''
        Number of rounds whose loser was not decided by votes alone.
        '''
        return sum(
            1 for i in range(1, self.n_rounds() + 1)
            if self.get_round_decided_by(i) not in (None, "plurality")
        )

    def _compute_contest_stat_table(self) -> pd.DataFrame:

        stat_funcs = [
            self._n_candidates,
            self._n_ballots,
            self._undervote,
            self._number_of_rounds,
            self._winner,
            self._first_round_winner_vote,
            self._final_round_winner_vote,
            self._first_round_winner_percent,
            self._final_round_winner_percent,
            self._first_round_winner_place,
            self._come_from_behind,
            self._first_round_active_votes,
            self._final_round_active_votes,
            self._total_exhausted,
            self._tiebreak_eliminations,
        ]

        stats = {"contest": self.name}
        stats.update({f.__name__.lstrip("_"): f() for f in stat_funcs})
        return pd.DataFrame([stats])

    def get_stats(self) -> pd.DataFrame:
        """Summary statistics of the tabulation.

        :return: A single row dataframe, one column per statistic.
        :rtype: pd.DataFrame
        """
        return self._compute_contest_stat_table()
