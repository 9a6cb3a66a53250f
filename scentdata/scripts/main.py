import argparse
import logging
import os
import os.path as osp

from scentdata import config as cfg
from scentdata.config import LabelConfig
from scentdata.data.loader import load_goodscents, load_leffingwell
from scentdata.pipeline import label_prevalence, labels_per_molecule, run_pipeline


def main(config):

    os.makedirs(config["output_dir"], exist_ok=True)

    leffingwell = load_leffingwell(config["commit"], dense=config["dense_leffingwell"])
    goodscents = load_goodscents(config["commit"])

    label_config = LabelConfig(min_support=config["min_support"], odorless_label=config["odorless_label"])
    result = run_pipeline(leffingwell, goodscents, label_config)

    df = result.to_frame()
    df.to_csv(osp.join(config["output_dir"], cfg.data_file), index=False)
    result.tokenizer.save(osp.join(config["output_dir"], cfg.key_file))

    with open(osp.join(config["output_dir"], cfg.labels_file), "w", encoding="utf-8") as f:
        for label in result.tokenizer.labels:
            f.write(label + "\n")

    label_prevalence(result.table).to_csv(osp.join(config["output_dir"], cfg.counts_file), index=False)

    for row in result.stats:
        print(f"{row['stage']:>14}: {row['# molecules']} molecules, {row['# labels']} labels")
    print(labels_per_molecule(result.table).to_string(index=False))
    print(f"Saved {len(df)} molecules x {len(result.tokenizer)} labels to {config['output_dir']}")


def cli():
    parser = argparse.ArgumentParser(description="Combine Goodscents and Leffingwell odor labels")
    parser.add_argument("--output_dir", default=cfg.output_dir, type=str)
    parser.add_argument("--commit", default=cfg.PYRFUME_COMMIT, type=str)
    parser.add_argument("--min_support", default=cfg.MIN_LABEL_SUPPORT, type=int)
    parser.add_argument("--odorless_label", default=cfg.ODORLESS_LABEL, type=str)
    parser.add_argument("--dense_leffingwell", default=False, action=argparse.BooleanOptionalAction)
    parser.add_argument("--log_level", default="INFO", type=str)

    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    config = vars(args)
    print(config)
    main(config)


if __name__ == "__main__":
    cli()
