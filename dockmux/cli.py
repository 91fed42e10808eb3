"""
CLI - command line interface
"""

import argparse
import sys
import logging
from typing import Optional, List

from .api import DockerClient, DockerException, Stream
from .settings_manager import SettingsManager

logger = logging.getLogger(__name__)


class DockmuxCLI:
    """Docker client CLI interface"""

    def __init__(self, client: Optional[DockerClient] = None, settings: Optional[SettingsManager] = None):
        """
        Initialize CLI

        Args:
            client: Docker client (default: built from settings)
            settings: Settings manager (default: user settings file)
        """
        self.settings = settings or SettingsManager()
        self.client = client or DockerClient.from_settings(self.settings)

    def check_docker(self):
        """Show daemon version"""
        version = self.client.version() or {}
        info = self.client.info() or {}

        print("Docker information:")
        print(f"  Server: {info.get('ServerVersion', 'Unknown')}")
        print(f"  API: {version.get('ApiVersion', 'Unknown')}")
        print(f"  OS: {version.get('Os', 'Unknown')}/{version.get('Arch', 'Unknown')}")
        print(f"  Containers: {info.get('Containers', 0)} ({info.get('ContainersRunning', 0)} running)")
        return True

    def list_containers(self, all_containers: bool = False):
        """List containers"""
        containers = self.client.containers.list(all=all_containers)

        if not containers:
            logger.info("No containers found")
            return True

        print(f"{'NAME':<30} {'STATUS':<15} {'IMAGE':<40} {'ID':<15}")
        print("-" * 100)

        for c in containers:
            print(f"{c.name:<30} {c.status:<15} {c.image:<40} {c.short_id:<15}")

        print(f"\nTotal: {len(containers)}")
        return True

    def container_action(self, action: str, name: str, **kwargs):
        """Run a lifecycle action (start, stop, restart, pause, unpause, remove, rename)"""
        logger.info(f"{action.capitalize()} container {name}...")
        getattr(self.client.containers, action)(name, **kwargs)
        logger.info(f"✓ {action.capitalize()} {name}: done")
        return True

    def print_frames(self, frames, show_stream: bool = False):
        """Print frames, stderr frames go to stderr"""
        count = 0
        for frame in frames:
            out = sys.stderr if frame.stream == Stream.STDERR else sys.stdout
            if show_stream:
                print(f"[{frame.stream.name.lower()}] {frame.text}", file=out)
            else:
                print(frame.text, file=out)
            out.flush()
            count += 1
        return count

    def show_logs(self, name: str, follow: bool = False, tail: str = 'all', timestamps: bool = False,
                  stdout: bool = True, stderr: bool = True, tty: Optional[bool] = None,
                  show_stream: bool = False):
        """Show container logs"""
        logs = self.client.containers.logs(
            name, stdout=stdout, stderr=stderr, stream=True, follow=follow,
            tail=tail, timestamps=timestamps, tty=tty
        )
        with logs:
            count = self.print_frames(logs, show_stream=show_stream)
        logger.debug(f"{count} log lines from {name}")
        return True

    def attach(self, name: str, stdout: bool = True, stderr: bool = True, tty: Optional[bool] = None,
               show_stream: bool = False):
        """Attach to container output until it exits"""
        logger.info(f"Attached to {name} (Ctrl+C to detach)")
        with self.client.containers.attach(name, stdout=stdout, stderr=stderr, tty=tty) as frames:
            self.print_frames(frames, show_stream=show_stream)
        return True

    def list_networks(self):
        """List networks"""
        networks = self.client.networks.list()

        if not networks:
            logger.info("Networks not found")
            return True

        print(f"{'NAME':<25} {'DRIVER':<15} {'SCOPE':<10} {'CONTAINERS':<10}")
        print("-" * 60)

        for n in networks:
            print(f"{n.name:<25} {n.driver:<15} {n.scope:<10} {len(n.containers):<10}")

        print(f"\nTotal: {len(networks)}")
        return True

    def list_volumes(self):
        """List volumes"""
        volumes = self.client.volumes.list()

        if not volumes:
            logger.info("Volumes not found")
            return True

        print(f"{'NAME':<40} {'DRIVER':<15} {'MOUNTPOINT'}")
        print("-" * 100)

        for v in volumes:
            print(f"{v.name:<40} {v.driver:<15} {v.mountpoint}")

        print(f"\nTotal: {len(volumes)}")
        return True

    def list_images(self, all_images: bool = False):
        """List images"""
        images = self.client.images.list(all=all_images)

        if not images:
            logger.info("Images not found")
            return True

        print(f"{'TAG':<50} {'ID':<15}")
        print("-" * 65)

        for image in images:
            print(f"{(image.tags[0] if image.tags else '<none>'):<50} {image.short_id:<15}")

        print(f"\nTotal: {len(images)}")
        return True

    def prune(self):
        """Remove stopped containers, unused networks and volumes"""
        containers = self.client.containers.prune() or {}
        networks = self.client.networks.prune() or {}
        volumes = self.client.volumes.prune() or {}

        print(f"Containers deleted: {len(containers.get('ContainersDeleted') or [])}")
        print(f"Networks deleted: {len(networks.get('NetworksDeleted') or [])}")
        print(f"Volumes deleted: {len(volumes.get('VolumesDeleted') or [])}")
        reclaimed = (containers.get('SpaceReclaimed') or 0) + (volumes.get('SpaceReclaimed') or 0)
        print(f"Space reclaimed: {reclaimed} bytes")
        return True


def build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser"""
    parser = argparse.ArgumentParser(
        prog='dockmux',
        description='dockmux - Docker Engine API client',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage examples:
  %(prog)s list --all                              # List containers
  %(prog)s logs --name web --follow --tail 50      # Follow container output
  %(prog)s attach --name web                       # Attach to running container
  %(prog)s rename --name web --new-name web-old
  %(prog)s check                                   # Check Docker daemon
"""
    )

    parser.add_argument(
        'action',
        choices=[
            'check', 'list', 'start', 'stop', 'restart', 'remove', 'rename',
            'pause', 'unpause', 'logs', 'attach', 'networks', 'volumes', 'images', 'prune'
        ],
        help='Action'
    )

    # Container parameters
    parser.add_argument('--name', help='Container name or ID')
    parser.add_argument('--new-name', help='New container name (rename)')
    parser.add_argument('--force', action='store_true', help='Force action')
    parser.add_argument('--all', action='store_true', help='Show all containers/images')

    # Log parameters
    parser.add_argument('--follow', action='store_true', help='Follow log output')
    parser.add_argument('--tail', help='Number of log lines (default: all)')
    parser.add_argument('--timestamps', action='store_true', help='Show timestamps')
    parser.add_argument('--stdout-only', action='store_true', help='Only stdout')
    parser.add_argument('--stderr-only', action='store_true', help='Only stderr')
    parser.add_argument('--tty', action='store_true', default=None,
                        help='Container has a TTY (skip stream detection)')
    parser.add_argument('--show-stream', action='store_true', help='Prefix lines with their stream')

    # Connection parameters
    parser.add_argument('--socket', help='Docker daemon address (unix:// or tcp://)')
    parser.add_argument('--timeout', type=float, help='Request timeout in seconds')
    parser.add_argument('--log-level', help='Log level (default: from settings)')

    return parser


def run_cli(argv: Optional[List[str]] = None, settings: Optional[SettingsManager] = None) -> int:
    """
    Start CLI application

    Returns:
        Process exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = settings or SettingsManager()
    level = (args.log_level or settings.get('log_level') or 'INFO').upper()
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format='%(message)s')

    if args.socket:
        settings.set('docker_socket_path', args.socket, save=False)
    if args.timeout:
        settings.set('timeout', args.timeout, save=False)

    needs_name = ('start', 'stop', 'restart', 'remove', 'rename', 'pause', 'unpause', 'logs', 'attach')
    if args.action in needs_name and not args.name:
        parser.error(f"{args.action} requires --name")
    if args.action == 'rename' and not args.new_name:
        parser.error("rename requires --new-name")
    if args.stdout_only and args.stderr_only:
        parser.error("--stdout-only and --stderr-only are mutually exclusive")

    try:
        cli = DockmuxCLI(settings=settings)
    except (DockerException, FileNotFoundError, ValueError) as e:
        logger.error(f"Initialization error: {e}")
        return 1

    stdout = not args.stderr_only
    stderr = not args.stdout_only

    try:
        if args.action == 'check':
            cli.check_docker()
        elif args.action == 'list':
            cli.list_containers(all_containers=args.all)
        elif args.action == 'remove':
            cli.container_action('remove', args.name, force=args.force)
        elif args.action == 'rename':
            cli.container_action('rename', args.name, new_name=args.new_name)
        elif args.action in ('start', 'stop', 'restart', 'pause', 'unpause'):
            cli.container_action(args.action, args.name)
        elif args.action == 'logs':
            cli.show_logs(
                args.name,
                follow=args.follow or bool(settings.get('follow_logs')),
                tail=args.tail or str(settings.get('tail', 'all')),
                timestamps=args.timestamps,
                stdout=stdout,
                stderr=stderr,
                tty=args.tty,
                show_stream=args.show_stream
            )
        elif args.action == 'attach':
            cli.attach(args.name, stdout=stdout, stderr=stderr, tty=args.tty,
                       show_stream=args.show_stream)
        elif args.action == 'networks':
            cli.list_networks()
        elif args.action == 'volumes':
            cli.list_volumes()
        elif args.action == 'images':
            cli.list_images(all_images=args.all)
        elif args.action == 'prune':
            cli.prune()
    except KeyboardInterrupt:
        logger.info("\nInterrupted")
        return 130
    except DockerException as e:
        logger.error(f"Error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(run_cli())
