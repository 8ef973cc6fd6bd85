"""Progress display for polled jobs."""

from typing import Optional

import click

from timekeeper.jobs.tracker import JobSnapshot


class JobProgressPrinter:
    """Echo the progress lines of a job as they appear.

    Passed as ``on_update`` to the poller; each call prints only the lines
    not printed yet, plus a status line whenever the status changes.

    Attributes:
        lines_printed: Number of progress lines echoed so far
        last_status: Status seen on the previous update
    """

    def __init__(self):
        self.lines_printed = 0
        self.last_status: Optional[str] = None

    def __call__(self, snapshot: JobSnapshot) -> None:
        status = snapshot.status.value
        if status != self.last_status:
            click.echo(f"[job {snapshot.id}] {status}")
            self.last_status = status

        for line in snapshot.progress[self.lines_printed :]:
            click.echo(f"  {line.timestamp:%H:%M:%S}  {line.message}")
        self.lines_printed = len(snapshot.progress)
