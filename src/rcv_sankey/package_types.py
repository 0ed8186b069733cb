
import pathlib

from typing import (Any, Callable, Dict, Tuple, Union)

# used in parser function
Path = Union[str, pathlib.Path]

# flow graph vertex key, (candidate display name, round number)
VertexKey = Tuple[str, int]

# returned by parser functions, holds "candidates" and "ballots" lists
# plus optional "candidate_groups" and "ballot_groups" split mappings
ParsedElection = Dict[str, Any]

# returned from parser module, get_parser_dict
ParserDict = Dict[str, Callable[..., ParsedElection]]

# round tally, candidate id -> vote count
RoundTally = Dict[int, int]

# plain flow edge, as consumed by the chart renderer
EdgeDict = Dict[str, str]

