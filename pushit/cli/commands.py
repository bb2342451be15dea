"""CLI Commands"""

import os
import sys

from pushit.config import API_KEY_ENV, Config, load_config, save_config, get_config_path
from pushit.output import bold, dim, info, success, warning, print_success

ENV_OVERRIDES = ('PUSHIT_PROVIDER', 'PUSHIT_MODEL', 'PUSHIT_API_URL', 'PUSHIT_TIMEOUT')


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .pushitrc found)")

    overrides = [(name, os.environ[name]) for name in ENV_OVERRIDES if os.environ.get(name)]
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for name, value in overrides:
            print(f"    {name}={value}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:              {info(config.provider)}")
    print(f"    model:                 {info(config.model or 'provider default')}")
    print(f"    api_url:               {info(config.api_url or 'provider default')}")
    print(f"    include_file_contents: {info(str(config.include_file_contents).lower())}")
    print(f"    max_diff_chars:        {info(str(config.max_diff_chars))}")
    print(f"    max_prompt_chars:      {info(str(config.max_prompt_chars))}")
    print(f"    timeout:               {info(str(config.timeout))}s")
    print(f"    push:                  {info(str(config.push).lower())}")

    key_env = API_KEY_ENV.get(config.provider, '')
    key_state = success('set') if os.environ.get(key_env) else warning('missing')
    print(f"\n  {dim('Credential:')} {key_env} {key_state}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .pushitrc (in current directory)")
    print(f"    Global: ~/.pushitrc")
    print(f"\n  {dim('Run')} pushit --setup {dim('to configure')}\n")

    return 0


def run_setup() -> int:
    """Quick setup wizard."""
    display_config()
    print(f"{bold('Setup Wizard')}\n")

    print("Choose provider:\n")
    print("  1. OpenRouter (any hosted model, OPENROUTER_API_KEY)")
    print("  2. Claude API (ANTHROPIC_API_KEY)\n")

    while True:
        choice = input("Select [1/2]: ").strip()
        if choice == '1':
            provider = 'openrouter'
            break
        elif choice == '2':
            provider = 'claude'
            break

    model = input("\nModel (Enter for default): ").strip() or None

    print("\nInclude changed file contents in the prompt? [Y/n]: ", end='')
    include_files = input().strip().lower() != 'n'

    print("\nOffer to push after committing? [Y/n]: ", end='')
    push = input().strip().lower() != 'n'

    config = Config(
        provider=provider,
        model=model,
        include_file_contents=include_files,
        push=push,
    )
    path = save_config(config, global_config=True)

    print_success(f"Saved to {path}")
    if not os.environ.get(API_KEY_ENV[provider]):
        print(dim(f"Remember to export {API_KEY_ENV[provider]} before running pushit."))
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        line = 'eval "$(register-python-argcomplete pushit)"'
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell pushit | Out-String | Invoke-Expression\n")
        print("To make it permanent, add to your $PROFILE:\n")
        print("  register-python-argcomplete --shell powershell pushit | Out-String | Invoke-Expression")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete pushit)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish pushit | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
