"""
Wack Studio
Experimental DCT + palette image codec
"""

import argparse
import logging
import sys


def setup_logging(log_level: str = "WARNING"):
    """Console logging for the codec modules."""
    logging.getLogger().handlers.clear()
    
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, log_level.upper()))
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%H:%M:%S'
    ))
    
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.addHandler(console_handler)


def add_codec_arguments(parser: argparse.ArgumentParser):
    parser.add_argument('--segment-size', type=int, default=8, help='DCT block size')
    parser.add_argument('--threshold', type=float, default=0.0,
                        help='Fraction of each block\'s coefficients to drop (0-1)')
    parser.add_argument('--subsample-size', type=int, default=1,
                        help='Chroma block size; 0 stores grayscale')
    parser.add_argument('--subsample-mode', choices=['average', 'first'], default='average')
    parser.add_argument('--num-colors', type=int, default=0,
                        help='Chroma palette size; 0 stores raw chroma')
    parser.add_argument('--dither', action='store_true', help='Dither palette matching')
    parser.add_argument('--grayscale-palette', action='store_true',
                        help='Use evenly spaced gray levels as the palette')
    parser.add_argument('--page-size', type=int, default=1024, help='Compressor page size')
    parser.add_argument('--backend', choices=['reference', 'scipy', 'torch', 'auto'],
                        default='reference')


def params_from_args(args):
    from models.codec_params import CodecParams
    
    return CodecParams(
        segment_size=args.segment_size,
        threshold=args.threshold,
        subsample_size=args.subsample_size,
        num_colors=args.num_colors,
        dither=args.dither,
        grayscale_palette=args.grayscale_palette,
        subsample_mode=args.subsample_mode,
        page_size=args.page_size,
        backend=args.backend,
    )


def run_encode(args):
    from engines.pipeline import encode
    from utils.image_io import crop_to_multiple, load_image, write_container
    
    params = params_from_args(args)
    image = crop_to_multiple(load_image(args.input), params.segment_size)
    data = encode(image, params)
    write_container(data, args.output)
    print(f"Encoded {image.shape[1]}x{image.shape[0]} -> {args.output} ({len(data)} bytes)")


def run_decode(args):
    from engines.pipeline import decode
    from utils.image_io import read_container, save_image
    
    image = decode(read_container(args.input), include_alpha=False, page_size=args.page_size)
    save_image(image, args.output)
    print(f"Decoded {image.shape[1]}x{image.shape[0]} -> {args.output}")


def run_roundtrip(args):
    from engines.pipeline import compress_reconstruct
    from utils.image_io import crop_to_multiple, load_image, save_image
    from utils.test_images import generate_demo_image
    
    params = params_from_args(args)
    if args.synthetic:
        image = generate_demo_image(args.synthetic)
        if image is None:
            print(f"Unknown synthetic image: {args.synthetic}")
            sys.exit(1)
    elif args.input:
        print(f"Loading: {args.input}")
        image = load_image(args.input)
    else:
        print("Error: an input image or --synthetic is required")
        sys.exit(1)
    image = crop_to_multiple(image, params.segment_size)
    
    print(f"Image: {image.shape[1]}x{image.shape[0]}")
    result, _ = compress_reconstruct(image, params)
    
    print("\n=== Results ===")
    print(f"PSNR (Y):  {result.psnr_y:.2f} dB")
    print(f"SSIM (Y):  {result.ssim_y:.4f}")
    print(f"Kept:      {result.retained_coeffs}/{result.block_coeffs} coefficients per block")
    print(f"Payload:   {result.payload_size} bytes")
    print(f"Container: {result.compressed_size} bytes")
    print(f"BPP:       {result.bpp:.3f}")
    print(f"Ratio:     {result.compression_ratio:.2f}:1")
    print(f"Time:      {result.encode_time_ms + result.decode_time_ms:.2f} ms")
    
    save_image(result.reconstructed_image, args.output)
    print(f"\nSaved: {args.output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Wack image codec')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    sub = parser.add_subparsers(dest='command', required=True)
    
    enc = sub.add_parser('encode', help='Encode an image into a .wack container')
    enc.add_argument('input')
    enc.add_argument('output')
    add_codec_arguments(enc)
    enc.set_defaults(func=run_encode)
    
    dec = sub.add_parser('decode', help='Decode a .wack container into an image')
    dec.add_argument('input')
    dec.add_argument('output')
    dec.add_argument('--page-size', type=int, default=1024)
    dec.set_defaults(func=run_decode)
    
    rt = sub.add_parser('roundtrip', help='Encode, decode and report quality')
    rt.add_argument('input', nargs='?')
    rt.add_argument('--synthetic', metavar='NAME',
                    help='gradient, checkerboard, chroma_stripes or noise')
    rt.add_argument('--output', default='reconstructed.png')
    add_codec_arguments(rt)
    rt.set_defaults(func=run_roundtrip)
    
    return parser


def main(argv=None):
    from models.errors import CodecError
    
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        args.func(args)
    except (CodecError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
