"""Git management for dependency repositories."""
import subprocess
from pathlib import Path
from typing import Dict, Optional, Set

from scrollsmith.core.errors import ConfigError
from scrollsmith.core.logger import get_logger
from scrollsmith.core.package_loader import PackageContext, PackageLoader

logger = get_logger(__name__)


class GitManager:
    """Fetches declared repositories into the module cache."""

    def __init__(self, mock: bool = False):
        self.mock = mock

    def repo_exists(self, path: Path) -> bool:
        """Check if a git checkout already exists at the given path."""
        return (Path(path) / '.git').exists()

    def clone_repo(self, url: str, path: Path, branch: Optional[str] = None) -> bool:
        """Clone a git repository.

        Args:
            url: Git repository URL
            path: Directory to clone into
            branch: Branch to clone (default: the remote's default branch)

        Returns:
            True if successful, False otherwise
        """
        if self.mock:
            logger.info(f"MOCK: Would clone {url} to {path}")
            return True

        cmd = ['git', 'clone']
        if branch:
            cmd += ['-b', branch]
        cmd += [url, str(path)]

        try:
            logger.info(f"Cloning {url} to {path}")
            subprocess.run(cmd, capture_output=True, text=True, check=True)
            logger.info(f"✓ Successfully cloned repository to {path}")
            return True
        except FileNotFoundError:
            logger.error("git executable not found")
            return False
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to clone repository: {e}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            return False

    def pull_repo(self, path: Path) -> bool:
        """Pull latest changes from git repository.

        Args:
            path: Path to the checkout

        Returns:
            True if successful, False otherwise
        """
        if self.mock:
            logger.info(f"MOCK: Would git pull in {path}")
            return True

        try:
            logger.info(f"Pulling latest changes in {path}")
            result = subprocess.run(
                ['git', 'pull'],
                cwd=str(path),
                capture_output=True,
                text=True,
                check=True,
            )
            if result.stdout:
                logger.debug(f"Git output: {result.stdout}")
            return True
        except FileNotFoundError:
            logger.error("git executable not found")
            return False
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to pull repository: {e}")
            if e.stderr:
                logger.error(f"Error output: {e.stderr}")
            return False

    def install(self, context: PackageContext, update: bool = False) -> Dict[str, bool]:
        """Fetch every declared repository, then the repositories they declare.

        All modules land in the module cache of ``context``, one directory per
        repository name. A name is fetched once; later declarations of the
        same name are ignored.

        Args:
            context: Package whose repositories are installed
            update: Pull checkouts that already exist

        Returns:
            Result per repository name
        """
        loader = PackageLoader(context.settings)
        results: Dict[str, bool] = {}
        pending = list(context.config.repositories)
        seen: Set[str] = set()

        while pending:
            repository = pending.pop(0)
            if repository.name in seen:
                continue
            seen.add(repository.name)

            module_root = context.module_root(repository.name)
            if module_root.exists():
                if update and self.repo_exists(module_root):
                    results[repository.name] = self.pull_repo(module_root)
                else:
                    logger.info(f"Repository {repository.name} already installed")
                    results[repository.name] = True
            else:
                if not self.mock:
                    module_root.parent.mkdir(parents=True, exist_ok=True)
                results[repository.name] = self.clone_repo(repository.uri, module_root)

            if not results[repository.name]:
                continue

            try:
                module = loader.load(loader.descriptor_path(module_root))
            except ConfigError as e:
                logger.debug(f"No nested repositories for {repository.name}: {e}")
                continue
            pending.extend(module.repositories)

        return results
