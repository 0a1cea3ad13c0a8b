import os

from appbundle.cli import get_args


def config_dir():
  return os.environ.get('APPBUNDLE_CONFIG_DIR', os.getcwd())

def env_file():
  # --config wins over the config dir
  args = get_args()
  if args is not None and getattr(args, 'config', None):
    return args.config
  return os.path.join(config_dir(), 'bundle.env')

def verbose():
  # Check environment variable first
  if os.environ.get('VERBOSE') == 'true':
    return True
  # Check parsed args
  args = get_args()
  return args is not None and args.verbose

def log_level():
  if verbose():
    return 'debug'
  else:
    return os.environ.get('LOG_LEVEL', 'info')
