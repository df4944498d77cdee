from benchmarks.throughput import bench


def main():
    reader, plain = bench(100000)
    print(f"LineStreamReader: {reader:.6f}s")
    print(f"file iteration: {plain:.6f}s")


if __name__ == "__main__":
    main()
