"""AsyncClick CLI for dependency analysis.

Provides user-facing commands:
- check: Analyze a build's dependencies and enforce the policy
- classify: Show which dependency groups the policy scans
- settings: Show the engine settings derived from a policy
"""

import functools

import asyncclick as click
import structlog

from vulngate.core.config import Policy, ReportFormat, load_config
from vulngate.core.exceptions import ConfigError
from vulngate.core.log_config import configure_logging
from vulngate.core.settings import translate_policy

logger = structlog.get_logger()

MASKED = "********"


def load_policy(path: str | None, **overrides) -> Policy:
    """Load the policy file (or defaults) and apply command line overrides."""
    policy = Policy.from_file(path) if path else Policy()
    updates = {key: value for key, value in overrides.items() if value is not None}
    if updates:
        policy = Policy.model_validate({**policy.model_dump(), **updates})
    return policy


@click.group()
@click.option("--log-level", default=None, help="Log level (default: $VULNGATE_LOG_LEVEL or INFO)")
@click.pass_context
async def cli(ctx, log_level: str | None):
    """vulngate - Dependency vulnerability gate for builds"""
    ctx.ensure_object(dict)
    config = load_config()
    configure_logging(log_level or config.log_level, config.log_format)
    ctx.obj["config"] = config


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option("--policy", "-p", "policy_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Policy JSON file. Default: built-in policy.")
@click.option("--format", "-f", "report_format", type=click.Choice([f.value for f in ReportFormat]),
              default=None, help="Report format override")
@click.option("--output-dir", "-o", default=None, help="Report output directory override")
@click.option("--fail-on-cvss", type=float, default=None,
              help="CVSS threshold override (values above 10 disable the gate)")
@click.pass_context
async def check(
    ctx,
    manifest: str,
    policy_path: str | None,
    report_format: str | None,
    output_dir: str | None,
    fail_on_cvss: float | None,
):
    """Analyze the dependencies listed in a build manifest.

    Examples:
        vulngate check build/dependency-manifest.json
        vulngate check manifest.json -p policy.json --fail-on-cvss 7
    """
    from vulngate.agents import AnalyzeAgent
    from vulngate.engine import DependencyCheckEngine
    from vulngate.host import (
        BuildManifest,
        ConfigurationCollector,
        project_context,
        resolve_capabilities,
    )

    config = ctx.obj["config"]

    try:
        policy = load_policy(
            policy_path,
            format=report_format,
            output_directory=output_dir,
            fail_build_on_cvss=fail_on_cvss,
        )
        build = BuildManifest.from_file(manifest)
    except (OSError, ValueError) as e:
        click.echo(f"[-] Invalid input: {e}")
        ctx.exit(1)

    capabilities = resolve_capabilities(build.host_version)
    project = project_context(build.project, capabilities)

    click.echo("[*] vulngate dependency analysis")
    click.echo(f"[*] Project: {project.display_name}")

    agent = AnalyzeAgent(
        policy=policy,
        project=project,
        engine_factory=functools.partial(
            DependencyCheckEngine.create,
            binary=config.dependency_check_binary,
            timeout=config.dependency_check_timeout,
        ),
        collector=ConfigurationCollector(build, policy, capabilities),
    )
    outcome = await agent.run()

    if outcome.vulnerabilities is not None:
        click.echo(f"[+] Found {outcome.vulnerabilities} vulnerabilities in project {project.name}")

    if outcome.failed:
        click.echo(f"\n[-] Dependency analysis failed:\n{outcome.reason}")
        ctx.exit(1)

    click.echo(f"[+] Analysis {outcome.status.value.replace('_', ' ')}")


@cli.command()
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False))
@click.option("--policy", "-p", "policy_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Policy JSON file. Default: built-in policy.")
@click.pass_context
async def classify(ctx, manifest: str, policy_path: str | None):
    """Show which dependency groups of a build would be scanned.

    Example:
        vulngate classify manifest.json -p policy.json
    """
    from vulngate.core.classifier import is_test_group, should_scan
    from vulngate.host import BuildManifest, resolve_capabilities

    try:
        policy = load_policy(policy_path)
        build = BuildManifest.from_file(manifest)
    except (OSError, ValueError) as e:
        click.echo(f"[-] Invalid input: {e}")
        ctx.exit(1)

    capabilities = resolve_capabilities(build.host_version)
    click.echo(f"[+] Groups in {build.project.name}: {len(build.groups)}")
    for group in build.groups:
        resolvable = capabilities.can_be_resolved(group)
        scanned = resolvable and should_scan(group, policy)
        click.echo(
            f"    {group.name}: scan={'yes' if scanned else 'no'} "
            f"test={'yes' if is_test_group(group) else 'no'} "
            f"resolvable={'yes' if resolvable else 'no'}"
        )


@cli.command()
@click.option("--policy", "-p", "policy_path", type=click.Path(exists=True, dir_okay=False),
              default=None, help="Policy JSON file. Default: built-in policy.")
@click.pass_context
async def settings(ctx, policy_path: str | None):
    """Show the dependency-check settings derived from a policy.

    Passwords are masked.

    Example:
        vulngate settings -p policy.json
    """
    try:
        policy = load_policy(policy_path)
        store = translate_policy(policy)
    except ConfigError as e:
        click.echo(f"[-] Invalid policy: {e}")
        ctx.exit(1)
    except (OSError, ValueError) as e:
        click.echo(f"[-] Invalid input: {e}")
        ctx.exit(1)

    try:
        if not len(store):
            click.echo("[*] No settings; engine defaults apply")
        for key, value in store.items():
            if key.value.endswith("password"):
                value = MASKED
            elif isinstance(value, bool):
                value = "true" if value else "false"
            elif isinstance(value, list):
                value = ",".join(value)
            click.echo(f"{key.value}={value}")
    finally:
        store.cleanup()


if __name__ == "__main__":
    cli()
