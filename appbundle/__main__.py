import sys

from appbundle.archive import tar_and_gzip_dir
from appbundle.cli import parse_args
from appbundle.debug import debug, log
from appbundle.desktop import generate_desktop_file
from appbundle.fs import md5sum, total_dir_size
from appbundle.icons import generate_icon_files
from appbundle.settings import load_settings


def run(args):
    if args.command == 'icons':
        return generate_icon_files(load_settings(args.config), args.data_dir, staged=args.staged)
    elif args.command == 'desktop':
        return generate_desktop_file(load_settings(args.config), args.data_dir)
    elif args.command == 'archive':
        dest_path = tar_and_gzip_dir(args.src_dir)
        print(dest_path)
        return dest_path
    elif args.command == 'md5sum':
        digest = md5sum(args.file)
        print(f'{digest}  {args.file}')
        return digest
    elif args.command == 'du':
        total = total_dir_size(args.dir)
        print(total)
        return total


def start(argv=None):
    # Parse args first (handles --version and exits)
    args = parse_args(argv)

    try:
        with debug(f'appbundle {args.command}') as timer:
            timer.result = run(args)
    except Exception as e:
        log(f'{args.command} failed: {e}', 'error')
        sys.exit(1)


if __name__ == '__main__':
    start()
