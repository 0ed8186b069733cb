from rcv_sankey.rcv.base import InstantRunoff, TabulationResult, tabulate

__all__ = ["InstantRunoff", "TabulationResult", "tabulate"]
