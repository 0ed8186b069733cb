
from typing import Dict

import pandas as pd

from rcv_sankey.util import EXHAUST, NAN


class IRV_tables:
    """
    Table and dictionary views of a finished InstantRunoff tabulation.
    """

    def _ordered_candidates(self):
        """
        Winner first, followed by the other candidates in reverse order of elimination.
        """
        winner = self.winner()
        losers = [self.get_candidate(cid) for cid in reversed(self.get_elimination_order())]
        return [winner] + losers

    def get_round_by_round_table(self) -> pd.DataFrame:
        """Create a table containing round by round details for the tabulation.

        One row per candidate, winner first, then an "exhaust" row and a "colsum" row.
        Each round contributes "r{n}_count", "r{n}_active_percent" and "r{n}_transfer" columns.
        Transfers of the final round are NaN since no one is eliminated.

        :return: round by round table
        :rtype: pd.DataFrame
        """
        ordered = self._ordered_candidates()
        rows = {c.name: {"candidate": c.name} for c in ordered}
        rows[EXHAUST] = {"candidate": EXHAUST}
        rows["colsum"] = {"candidate": "colsum"}

        for rnd in range(1, self.n_rounds() + 1):

            rnd_count_col = "r" + str(rnd) + "_count"
            rnd_percent_col = "r" + str(rnd) + "_active_percent"
            rnd_transfer_col = "r" + str(rnd) + "_transfer"

            rnd_info = dict(zip(*self.get_round_tally_tuple(rnd, only_round_active_candidates=False)))
            rnd_transfer = self.get_round_transfer_dict(rnd)
            active_total = sum(rnd_info.values())

            # add round data
            for cand in ordered:
                rows[cand.name][rnd_count_col] = rnd_info[cand.id]
                rows[cand.name][rnd_percent_col] = round(100 * rnd_info[cand.id] / active_total, 3) if active_total else 0.0
                rows[cand.name][rnd_transfer_col] = rnd_transfer.get(cand.id, 0) if rnd_transfer else NAN

            rows[EXHAUST][rnd_count_col] = self.get_round_exhausted(rnd)
            rows[EXHAUST][rnd_percent_col] = NAN
            rows[EXHAUST][rnd_transfer_col] = rnd_transfer.get(EXHAUST, 0) if rnd_transfer else NAN

            # sum round columns
            summed = [c.name for c in ordered] + [EXHAUST]
            rows["colsum"][rnd_count_col] = sum(rows[r][rnd_count_col] for r in summed)
            rows["colsum"][rnd_percent_col] = round(sum(rows[c.name][rnd_percent_col] for c in ordered), 3)
            rows["colsum"][rnd_transfer_col] = sum(rows[r][rnd_transfer_col] for r in summed) if rnd_transfer else NAN

        return pd.DataFrame(list(rows.values())).reset_index(drop=True)

    def get_round_by_round_dict(self) -> Dict:
        """Create a dictionary containing election round by round information that matches the nesting structure of RCVIS upload format.

        :return: Dictionary containing election round by round details
        :rtype: Dict
        """

        json_dict = {
            "config": {
                "contest": self.name,
                "notes": self.notes,
                "threshold": 0,
            },
            "results": [],
        }

        for round_num in range(1, self.n_rounds() + 1):

            tally_dict = {
                self.get_candidate(cid).name: str(tally)
                for cid, tally in zip(*self.get_round_tally_tuple(round_num, desc_sort=True))
            }
            transfer_list = []

            loser = self.get_round_loser(round_num)
            if loser is None:
                transfer_list.append({"elected": self.winner().name, "transfers": {}})
            else:
                round_transfer = {
                    ("exhausted" if key == EXHAUST else self.get_candidate(key).name): str(val)
                    for key, val in self.get_round_transfer_dict(round_num).items()
                    if val > 0
                }
                transfer_list.append({"eliminated": self.get_candidate(loser).name, "transfers": round_transfer})

            json_dict["results"].append(
                {
                    "round": round_num,
                    "tally": tally_dict,
                    "tallyResults": transfer_list,
                }
            )

        return json_dict

    def get_flow_edge_table(self) -> pd.DataFrame:
        """Flow edges as a table with "source", "target" and "weight" columns, in edge order.
        Weights are kept as integers here, :meth:`FlowEdge.to_dict` gives the string form.
        """
        edges = self.get_flow_edges()
        return pd.DataFrame(
            [{"source": e.source, "target": e.target, "weight": e.weight} for e in edges],
            columns=["source", "target", "weight"],
        )
