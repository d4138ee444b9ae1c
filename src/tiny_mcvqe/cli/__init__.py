"""
Command-line interface for tiny-mcvqe.

Usage:
    tiny-mcvqe run datafile.txt --sites 4
    tiny-mcvqe run datafile.txt --sites 4 --cyclic --gradient parameter-shift --optimizer L-BFGS-B
    tiny-mcvqe info
"""
import argparse
import sys
import time

from ..exceptions import MCVQEError


def cmd_run(args):
    """Run MC-VQE on a site data file."""
    from ..config import MCVQEConfig
    from ..mcvqe import MCVQE

    config = MCVQEConfig(
        n_sites=args.sites,
        data_path=args.data,
        cyclic=args.cyclic,
        n_states=args.n_states,
        interference=not args.no_interference,
        log_level=args.verbose,
        gradient_strategy=args.gradient,
        optimizer=args.optimizer,
        max_iterations=args.maxiter,
        shots=args.shots,
        seed=args.seed,
        max_workers=args.workers,
    )
    topology = "ring" if config.cyclic else "chain"
    print(f"MC-VQE: {config.n_sites}-site {topology}, {config.n_states} states, "
          f"optimizer {config.optimizer}")

    start = time.time()
    result = MCVQE(config).run()
    elapsed = time.time() - start

    print(f"\nResult:")
    print(f"  Average energy: {result.energy:.9f} Ha")
    print(f"  Circuit depth: {result.circuit_depth}")
    print(f"  Gates: {result.n_gates}")
    print(f"  Evaluations: {result.n_evaluations}")
    print(f"  Time: {elapsed:.2f}s")
    print()
    print(result.spectrum_report())


def cmd_info(args):
    """Show tiny-mcvqe information."""
    from .. import __version__

    print(f"""
tiny-mcvqe v{__version__}
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

Multi-Configurational VQE for chromophore chains and rings.

Usage:
  tiny-mcvqe run datafile.txt --sites 4
  tiny-mcvqe run datafile.txt --sites 4 --cyclic --no-interference
""")


def build_parser():
    parser = argparse.ArgumentParser(
        prog='tiny-mcvqe',
        description='Multi-Configurational VQE for chromophore systems'
    )
    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Run command
    run_parser = subparsers.add_parser('run', help='Run MC-VQE')
    run_parser.add_argument('data', help='Site data file')
    run_parser.add_argument('--sites', type=int, required=True, help='Number of chromophores')
    run_parser.add_argument('--cyclic', action='store_true', help='Ring topology')
    run_parser.add_argument('--n-states', type=int, default=None,
                            help='Reference states to average (default: sites + 1)')
    run_parser.add_argument('--no-interference', action='store_true',
                            help='Skip the interference stage')
    run_parser.add_argument('--gradient', default=None,
                            help='Gradient strategy: parameter-shift or finite-difference')
    run_parser.add_argument('--optimizer', default='COBYLA', help='scipy minimize method')
    run_parser.add_argument('--maxiter', type=int, default=200, help='Optimizer iterations')
    run_parser.add_argument('--shots', type=int, default=0, help='Shots (0 = exact)')
    run_parser.add_argument('--seed', type=int, default=None, help='Random seed')
    run_parser.add_argument('--workers', type=int, default=1, help='Worker threads')
    run_parser.add_argument('-v', '--verbose', action='count', default=0,
                            help='More log output (-v info, -vv debug)')
    run_parser.set_defaults(func=cmd_run)

    # Info command
    info_parser = subparsers.add_parser('info', help='Show tiny-mcvqe info')
    info_parser.set_defaults(func=cmd_info)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except MCVQEError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
