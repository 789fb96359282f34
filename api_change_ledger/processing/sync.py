# Copyright 2025 API Change Ledger contributors
# License AGPL-3.0 or later (http://www.gnu.org/licenses/agpl)

from pathlib import Path
import git
from tqdm import tqdm

from ..exceptions import SyncError

import logging

logger = logging.getLogger(__name__)


class CloneProgress(git.remote.RemoteProgress):
    def __init__(self):
        super().__init__()
        self.pbar = tqdm(leave=False)

    def update(self, op_code, cur_count, max_count=None, message=''):
        self.pbar.total = max_count
        self.pbar.n = cur_count
        self.pbar.refresh()
        if cur_count == max_count:
            self.pbar.close()


def clone_or_pull_repo(repo_url: str, local_path: Path):
    """Make sure the monitor repository is present and up to date."""
    if local_path.is_dir():
        logger.info(f"Repository already exists at {local_path}, pulling latest changes...")
        repo = git.Repo(local_path)
        try:
            repo.remotes.origin.pull(progress=CloneProgress())
        except git.exc.GitCommandError as e:
            raise SyncError(f"An error occurred during git pull: {e}") from e
        logger.info("Pull complete.")
        return repo

    logger.info(f"Cloning repository from {repo_url} into {local_path}...")
    try:
        repo = git.Repo.clone_from(
            repo_url, local_path, depth=1, progress=CloneProgress()
        )
        logger.info("Clone complete.")
        return repo
    except git.exc.GitCommandError as e:
        raise SyncError(f"An error occurred during git clone: {e}") from e

