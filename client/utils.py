"""Terminal output helpers for the client."""

import sys

from client.constants import GREEN, RESET

SIZE_UNITS = ('B', 'KiB', 'MiB', 'GiB', 'TiB', 'PiB')


def format_file_size(size_bytes: int) -> str:
    """
    Human-readable size in binary units, e.g. ``"512 B"`` or ``"1.50 MiB"``.
    """
    value = float(size_bytes)
    unit_index = 0
    while value >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        value /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{size_bytes} B"
    return f"{value:.2f} {SIZE_UNITS[unit_index]}"


class ProgressPrinter:
    """Upload progress callback that redraws one status line."""

    def __init__(self, file_name: str, stream=None):
        self.file_name = file_name
        self.stream = stream or sys.stdout

    def __call__(self, progress) -> None:
        if progress.stage == "finalize":
            line = f"\rFinalizing {self.file_name}...\n"
        else:
            line = (
                f"\rUploading {self.file_name}: {format_file_size(progress.bytes_sent)} / "
                f"{format_file_size(progress.total_bytes)} ({GREEN}{progress.percent:.1f}%{RESET})"
            )
        self.stream.write(line)
        self.stream.flush()
