import csv
import pathlib

NAN = float("nan")

# transfer key for ballots left with no active preference
EXHAUST = "exhaust"


class CSVLogger:
    """Csv file with a fixed header, flushed after every row."""

    def __init__(self, path, header_list):
        self.path = pathlib.Path(path)
        self.header = list(header_list)
        self.n_rows = 0
        self.file = open(self.path, "w", newline="", encoding="utf8")
        self.writer = csv.writer(self.file, quoting=csv.QUOTE_ALL)
        self.writer.writerow(self.header)
        self.file.flush()

    @property
    def lines_added(self):
        return self.n_rows > 0

    def write(self, row_list):
        if len(row_list) != len(self.header):
            raise RuntimeError(
                f"{self.path.name}: row has {len(row_list)} fields but the header has {len(self.header)}"
            )
        self.writer.writerow(row_list)
        self.file.flush()
        self.n_rows += 1

    def close(self):
        self.file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def verifyDir(dir_path, make_if_missing=True):
    """
    Make sure `dir_path` is a directory, creating it and its parents when missing.

    :raises RuntimeError: directory missing and `make_if_missing` is False
    """
    dir_path = pathlib.Path(dir_path)
    if dir_path.is_dir():
        return
    if not make_if_missing:
        raise RuntimeError(f"{dir_path} is not an existing folder")
    dir_path.mkdir(parents=True)


def safe_file_stub(name):
    """Keep alphanumerics, dashes and underscores so a contest name can be used in file names."""
    stub = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in str(name).strip())
    return stub or "contest"
