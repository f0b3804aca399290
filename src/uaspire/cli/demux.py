"""Console script for uaspire (demux).

Copyright © 2024 Pixelgen Technologies AB.
"""

from pathlib import Path

import click

from uaspire.cli.common import (
    design_option,
    logger,
    output_option,
    size_validator,
    threads_option,
)
from uaspire.config import DemuxDesign, uaspire_config
from uaspire.demux import demux_fastq_pair
from uaspire.demux.report import DemuxSampleReport
from uaspire.utils import (
    FASTQ_EXTENSIONS,
    get_sample_name,
    log_step_start,
    sanity_check_inputs,
    timer,
    write_parameters_file,
)


@click.command(
    "demux",
    short_help="demultiplex paired reads (FASTQ) into RBS counts per sample",
    options_metavar="<options>",
)
@click.argument(
    "read1",
    nargs=1,
    required=True,
    type=click.Path(exists=True),
    metavar="READ1",
)
@click.argument(
    "read2",
    nargs=1,
    required=True,
    type=click.Path(exists=True),
    metavar="READ2",
)
@click.option(
    "--sample-name",
    default=None,
    required=False,
    type=click.STRING,
    help="The sample name used in output paths, derived from READ1 if not given",
)
@click.option(
    "--chunk-size",
    default="1M",
    type=click.STRING,
    callback=size_validator,
    required=False,
    show_default=True,
    help="The number of read pairs classified per chunk",
)
@click.option(
    "--partition-size",
    default="1M",
    type=click.STRING,
    callback=size_validator,
    required=False,
    show_default=True,
    help="The maximum number of rows in each output count file",
)
@click.option(
    "--keep-intermediates",
    is_flag=True,
    default=False,
    help="Keep the per-chunk count files in tmp/parquet",
)
@threads_option
@design_option
@output_option
@click.pass_context
@timer
def demux(
    ctx,
    read1,
    read2,
    sample_name,
    chunk_size,
    partition_size,
    keep_intermediates,
    threads,
    design,
    design_file,
    output,
):
    """Demultiplex paired-end reads (FASTQ) into RBS counts per sample."""
    # log input parameters
    input_files = [read1, read2]
    log_step_start(
        "demux",
        input_files=input_files,
        output=output,
        sample_name=sample_name,
        chunk_size=chunk_size,
        partition_size=partition_size,
        keep_intermediates=keep_intermediates,
        threads=threads,
        design=design,
        design_file=design_file,
    )

    # some basic sanity check on the input files
    sanity_check_inputs(input_files, allowed_extensions=FASTQ_EXTENSIONS)

    sample_name = sample_name or get_sample_name(read1)

    # load assay design
    if design_file is not None:
        assay = DemuxDesign.from_yaml(design_file)
    else:
        assay = uaspire_config.get_design(design)

    logger.info("Demultiplexing input: %s and %s", read1, read2)

    result = demux_fastq_pair(
        read1=read1,
        read2=read2,
        sample_name=sample_name,
        output=output,
        design=assay,
        chunk_size=chunk_size,
        partition_size=partition_size,
        threads=threads,
        remove_intermediates=not keep_intermediates,
    )

    write_parameters_file(
        ctx,
        result.layout.parameters_file,
        command_path="uaspire demux",
    )

    report = DemuxSampleReport.from_run(sample_name, result.counters, result.merged)
    report.write_json_file(Path(result.layout.report_file), indent=4)
