"""
gleaner CLI - harvest build requirements from a described build

Commands:
    gleaner scan build.yaml -r ~/.m2/repository     # run the three-pass walk
    gleaner format org.example lib --version 1.0     # print one capability string
"""
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from gleaner.dependency import format_capability
from gleaner.driver import Gleaner
from gleaner.host import LocalRepository
from gleaner.model import SYSTEM_VERSION
from gleaner.project import DescriptorBuildHost, DescriptorPluginLoader, load_build_description
from gleaner.registry import CoordinateRegistry
from gleaner.rules import CompatVersionResolver, DependencyFilter
from gleaner.settings import get_settings, load_properties
from gleaner.shim import ModelLoadingShim
from gleaner.utils import GleanerError, get_logger, parse_assignments, setup_logging

console = Console()
logger = get_logger(__name__)


# ═══════════════════════════════════════════════════════════════════
# MAIN CLI GROUP
# ═══════════════════════════════════════════════════════════════════

@click.group()
@click.version_option(version='0.1.0')
@click.option('--log-level', default=None, help='Logging level (default from GLEANER_LOG_LEVEL)')
@click.pass_context
def main(ctx, log_level):
    """
    gleaner - build requirement harvesting

    Walks a multi-module build and emits the mvn(...) build requirements
    it actually needs.
    """
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    ctx.obj = settings


# ═══════════════════════════════════════════════════════════════════
# SCAN
# ═══════════════════════════════════════════════════════════════════

@main.command()
@click.argument('build_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--repository', '-r', type=click.Path(file_okay=False, path_type=Path),
              help='Maven-layout repository directory')
@click.option('--goal', '-g', 'goals', multiple=True, help='Lifecycle phase to plan (repeatable)')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path),
              help='Write build requirements to this file')
@click.option('--properties', 'properties_file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='YAML file with gleaner.filter.* / gleaner.version.* rules')
@click.option('-D', 'defines', multiple=True, metavar='KEY=VALUE', help='Set a rule property')
@click.option('--namespace', default=None, help='Capability namespace prefix')
@click.pass_obj
def scan(settings, build_file, repository, goals, output, properties_file, defines, namespace):
    """Collect the build requirements of BUILD_FILE"""
    try:
        properties = load_properties(
            properties_file or settings.properties_file,
            parse_assignments(defines),
        )
        dependency_filter = DependencyFilter.from_properties(properties)
        compat_versions = CompatVersionResolver.from_properties(properties)

        description, source = load_build_description(build_file)
        repo = LocalRepository(repository or settings.repository)
        registry = CoordinateRegistry()
        shim = ModelLoadingShim(registry, repo, DescriptorPluginLoader(description, repo))
        host = DescriptorBuildHost.from_description(description, source, shim)

        gleaner = Gleaner(
            host=host,
            registry=registry,
            repository=repo,
            module_index=host.reactor,
            dependency_filter=dependency_filter,
            compat_versions=compat_versions,
            goals=list(goals) or description.goals or settings.goals,
            namespace=settings.namespace if namespace is None else namespace,
            output_file=output or settings.output_file,
        )
        result = gleaner.execute()
    except GleanerError as e:
        console.print(f"\n[red]✗ Error: {e}[/red]")
        sys.exit(2)

    table = Table(title="Build Requirements")
    table.add_column("Capability", style="cyan")
    for br in result.build_requires:
        table.add_row(br)
    console.print(table)

    if result.success:
        console.print(f"\n[green]✓ {len(result.build_requires)} build requirement(s) ready[/green]")
    else:
        console.print(f"\n[red]✗ Missing {result.failed_stage} dependencies[/red]")
        sys.exit(1)


# ═══════════════════════════════════════════════════════════════════
# FORMAT
# ═══════════════════════════════════════════════════════════════════

@main.command(name='format')
@click.argument('group_id')
@click.argument('artifact_id')
@click.option('--extension', default='jar', show_default=True)
@click.option('--classifier', default='')
@click.option('--version', 'version', default=SYSTEM_VERSION, show_default=True)
@click.option('--package-version', default=None)
@click.option('--namespace', default=None)
def format_command(group_id, artifact_id, extension, classifier, version, package_version, namespace):
    """Print the capability string of one artifact"""
    click.echo(format_capability(
        group_id, artifact_id, extension, classifier, version, package_version, namespace
    ))


if __name__ == '__main__':
    main()
